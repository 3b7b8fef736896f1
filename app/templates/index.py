def get_html_template(photo_count: int = 3) -> str:
    slots = "\n".join(
        f'<button class="slot" id="slot{i}" onclick="selectSlot({i})">Slot {i + 1}</button>'
        for i in range(photo_count)
    )
    return """
    <!DOCTYPE html>
    <html lang="en">
    <head>
        <meta charset="UTF-8">
        <meta name="viewport" content="width=device-width, initial-scale=1.0">
        <title>Photo Booth Strip Builder</title>
        <style>
            body { font-family: sans-serif; margin: 0; display: flex; height: 100vh; }
            .sidebar { width: 280px; padding: 16px; background: #f4f4f6; overflow-y: auto; }
            .main { flex: 1; display: flex; flex-direction: column; padding: 16px; gap: 12px; }
            .camera { display: flex; gap: 12px; }
            #preview { width: 480px; background: #111; border-radius: 10px; }
            .filmstrip { display: flex; flex-direction: column; gap: 8px; width: 200px; }
            .slot { height: 60px; border-radius: 6px; border: 1px solid #ccc; }
            .slot.active { border: 3px solid #0a84ff; }
            .slot.filled { background: #d7f5dc; }
            #collage { max-height: 60vh; border-radius: 8px; border: 1px solid #ddd; }
            label { display: block; margin-top: 8px; font-size: 14px; }
            input[type=range] { width: 100%; }
        </style>
    </head>
    <body>
        <div class="sidebar">
            <h2>Photo Booth Builder</h2>
            <p>1) Snap photos &rarr; 2) Build collage &rarr; 3) Export A4 PDF</p>
            <label>Layout
                <select onchange="updateSettings({layout_mode: this.value})">
                    <option value="strip">Simple strip</option>
                    <option value="template">Template layout</option>
                </select>
            </label>
            <label>Spacing <input type="range" min="0" max="120" value="30" onchange="updateSettings({spacing: +this.value})"></label>
            <label>Outer Margin <input type="range" min="0" max="320" value="150" onchange="updateSettings({inset: +this.value})"></label>
            <label>Corner Radius <input type="range" min="0" max="80" value="8" onchange="updateSettings({corner_radius: +this.value})"></label>
            <label><input type="checkbox" checked onchange="updateSettings({draw_border: this.checked})"> Border</label>
            <label>Border Width <input type="range" min="0.5" max="20" step="0.5" value="1" onchange="updateSettings({border_width: +this.value})"></label>
            <label><input type="checkbox" onchange="updateSettings({mirror_photos: this.checked})"> Mirror Photos</label>
            <label><input type="checkbox" checked onchange="updateSettings({crop_to_four_by_three: this.checked})"> Crop Photos to 4:3</label>
            <label>Bottom Margin Extra <input type="range" min="0" max="240" value="240" onchange="updateSettings({bottom_margin_extra: +this.value})"></label>
            <label>Strip Length <input type="range" min="0.6" max="2.5" step="0.1" value="1.6" onchange="updateSettings({strip_length_factor: +this.value})"></label>
            <h3>Background</h3>
            <input type="file" accept="image/*" onchange="uploadBackground(this.files[0])">
            <button onclick="clearBackground()">Clear</button>
            <h3>Export</h3>
            <label>Strip width on A4 <input type="range" min="0.1" max="1" step="0.05" value="1" onchange="updateSettings({width_fraction: +this.value})"></label>
            <button id="exportBtn" onclick="exportPdf()" disabled>Export A4 PDF</button>
            <p id="message"></p>
        </div>
        <div class="main">
            <div class="camera">
                <img id="preview" alt="Camera Preview">
                <div class="filmstrip">
                    """ + slots + """
                    <button onclick="capture()">Snap</button>
                    <button onclick="clearSlot()">Clear Slot</button>
                </div>
            </div>
            <img id="collage" alt="Collage Preview">
        </div>
        <script>
            let status = null;

            async function api(method, path, body) {
                const options = {method, headers: {}};
                if (body instanceof FormData) {
                    options.body = body;
                } else if (body !== undefined) {
                    options.headers['Content-Type'] = 'application/json';
                    options.body = JSON.stringify(body);
                }
                const response = await fetch('/api/session' + path, options);
                const data = await response.json();
                if (!response.ok) {
                    document.getElementById('message').textContent = data.detail;
                    return null;
                }
                return data;
            }

            function render(data) {
                if (!data) return;
                status = data;
                data.filled_slots.forEach((filled, i) => {
                    const slot = document.getElementById('slot' + i);
                    slot.classList.toggle('filled', filled);
                    slot.classList.toggle('active', i === data.active_slot);
                });
                document.getElementById('exportBtn').disabled = !data.ready;
                if (data.ready) {
                    document.getElementById('collage').src = '/api/session/preview?t=' + Date.now();
                }
            }

            async function capture() {
                const result = await api('POST', '/capture');
                if (result) render(await api('GET', '/status'));
            }
            async function selectSlot(i) { render(await api('POST', '/slots/' + i + '/select')); }
            async function clearSlot() { render(await api('DELETE', '/slots/' + status.active_slot)); }
            async function updateSettings(update) { render(await api('PUT', '/settings', update)); }
            async function clearBackground() { render(await api('DELETE', '/background')); }
            async function uploadBackground(file) {
                const form = new FormData();
                form.append('file', file);
                render(await api('POST', '/background', form));
            }
            async function exportPdf() {
                const result = await api('POST', '/export');
                if (result) document.getElementById('message').textContent = result.message;
            }

            const ws = new WebSocket(`ws://${location.host}/ws`);
            ws.onmessage = (event) => {
                const message = JSON.parse(event.data);
                if (message.type === 'preview') {
                    document.getElementById('preview').src = 'data:image/jpeg;base64,' + message.data;
                }
            };

            api('POST', '/create').then(render);
        </script>
    </body>
    </html>
    """
