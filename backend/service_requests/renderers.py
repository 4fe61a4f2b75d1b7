from rest_framework.renderers import BaseRenderer


class PlainTextRenderer(BaseRenderer):
    """Renders the "message" of a response dict as a plain sentence for link clicks."""
    media_type = "text/plain"
    format = "txt"
    charset = "utf-8"

    def render(self, data, accepted_media_type=None, renderer_context=None):
        if isinstance(data, dict):
            data = data.get("message") or data.get("detail") or ""
        return str(data).encode(self.charset)
