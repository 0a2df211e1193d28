from typing import Any, Mapping, Optional

from core.constants import MUSTACHE_PLACEHOLDER_PATTERN


def render_html_placeholders(html: str, values: Optional[Mapping[str, Any]]) -> str:
    """
    Replace every {{ key }} in an HTML template.
    Keys are trimmed; a key with no value renders as an empty string.
    Example: "你好，{{ name }}！" with {"name": "张三"} → "你好，张三！"
    """
    if not html:
        return html

    values = {str(k): v for k, v in (values or {}).items()}

    def _replace(match):
        value = values.get(match.group(1).strip())
        return "" if value is None else str(value)

    # A function replacement keeps "$" and "\" in values literal.
    return MUSTACHE_PLACEHOLDER_PATTERN.sub(_replace, html)
