"""
A minimal stand-in for the target instance, used by the browser tests.

Serves a login view, a dashboard, a record edit view with "Add Attachment"
and "Save Record" actions, the SaveAttachments endpoint and the record
save endpoint.
"""

import http.server
import json
import threading
import urllib.parse

CONTENT_RECORD_PATH = "/Content/12/34"

LOGIN_HTML = """<!DOCTYPE html>
<html>
<head><title>Sign in</title></head>
<body>
  <input type="text" placeholder="Username" id="username">
  <input type="password" placeholder="Password" id="password">
  <button id="submit">Login</button>
  <script>
    document.getElementById('submit').addEventListener('click', () => {
      const user = document.getElementById('username').value;
      document.cookie = 'session=' + encodeURIComponent(user) + '; path=/';
      window.location.href = '{{landing}}';
    });
  </script>
</body>
</html>
"""

DASHBOARD_HTML = """<!DOCTYPE html>
<html><body><h1>Dashboard</h1></body></html>
"""

EDIT_HTML = """<!DOCTYPE html>
<html>
<body>
  <button id="add">Add Attachment</button>
  <input type="file" id="file" style="display:none">
  <ul id="attachments"></ul>
  <button id="save">Save Record</button>
  <script>
    const input = document.getElementById('file');
    document.getElementById('add').addEventListener('click', () => input.click());
    input.addEventListener('change', async () => {
      const file = input.files[0];
      const response = await fetch('{{save_attachments}}', {
        method: 'POST',
        headers: {'X-File-Name': encodeURIComponent(file.name)},
        body: file,
      });
      await response.json();
      const item = document.createElement('li');
      item.textContent = file.name;
      document.getElementById('attachments').appendChild(item);
      input.value = '';
    });
    document.getElementById('save').addEventListener('click', () => {
      fetch('{{record}}', {method: 'POST', body: '{}'});
    });
  </script>
</body>
</html>
"""


class FakeInstance:
    """
    Runs the fake instance on a local port in a daemon thread.

    Args:
        content_record_path: Base path of the record, e.g. /Content/12/34.
        login_succeeds: If False, the login button never reaches the dashboard.
        malformed_uploads: If True, SaveAttachments answers with an empty data list.
    """

    def __init__(self, content_record_path: str = CONTENT_RECORD_PATH, login_succeeds: bool = True, malformed_uploads: bool = False):
        self.content_record_path = content_record_path
        self.login_succeeds = login_succeeds
        self.malformed_uploads = malformed_uploads
        self.uploads: list[str] = []
        self.saves = 0
        self.server = http.server.ThreadingHTTPServer(("127.0.0.1", 0), self._handler_class())
        self.thread = threading.Thread(target=self.server.serve_forever, daemon=True)

    @property
    def url(self) -> str:
        host, port = self.server.server_address[:2]
        return f"http://{host}:{port}"

    @property
    def record_path(self) -> str:
        return f"{self.content_record_path}/Edit"

    @property
    def save_attachments_path(self) -> str:
        return f"{self.content_record_path}/SaveAttachments"

    def start(self):
        self.thread.start()

    def stop(self):
        self.server.shutdown()
        self.server.server_close()

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, *exc_info):
        self.stop()

    def _upload_body(self, file_name: str) -> dict:
        if self.malformed_uploads:
            return {"data": []}
        return {"data": [{"fileName": {"segments": [{"text": file_name}]}}]}

    def _handler_class(self):
        instance = self

        class Handler(http.server.BaseHTTPRequestHandler):
            def log_message(self, format, *args):
                pass

            def _send(self, status: int, body: str, content_type: str):
                data = body.encode("utf-8")
                self.send_response(status)
                self.send_header("Content-Type", content_type)
                self.send_header("Content-Length", str(len(data)))
                self.end_headers()
                self.wfile.write(data)

            def _read_body(self) -> bytes:
                length = int(self.headers.get("Content-Length", 0))
                return self.rfile.read(length)

            def do_GET(self):
                path = urllib.parse.urlsplit(self.path).path
                if path == "/Public/Login":
                    landing = "/Dashboard" if instance.login_succeeds else "/Public/Login?failed=1"
                    self._send(200, LOGIN_HTML.replace("{{landing}}", landing), "text/html")
                elif path == "/Dashboard":
                    self._send(200, DASHBOARD_HTML, "text/html")
                elif path == instance.record_path:
                    page = (EDIT_HTML
                            .replace("{{save_attachments}}", instance.save_attachments_path)
                            .replace("{{record}}", instance.record_path))
                    self._send(200, page, "text/html")
                else:
                    self._send(404, "Not Found", "text/plain")

            def do_POST(self):
                path = urllib.parse.urlsplit(self.path).path
                self._read_body()
                if path == instance.save_attachments_path:
                    file_name = urllib.parse.unquote(self.headers.get("X-File-Name", ""))
                    instance.uploads.append(file_name)
                    self._send(200, json.dumps(instance._upload_body(file_name)), "application/json")
                elif path == instance.record_path:
                    instance.saves += 1
                    self._send(200, json.dumps({"success": True}), "application/json")
                else:
                    self._send(404, "Not Found", "text/plain")

        return Handler
