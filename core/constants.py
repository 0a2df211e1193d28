import re

# ----------------------------
# 🔖 Placeholder Delimiters
# ----------------------------
# Word templates: ${key}, key is any run of non-"}" characters, matched exactly.
DOLLAR_PLACEHOLDER_PATTERN = re.compile(r"\$\{([^}]+)\}")
# HTML templates: {{ key }}, key trimmed.
MUSTACHE_PLACEHOLDER_PATTERN = re.compile(r"\{\{(.*?)\}\}")
# Table repeat marker: ${table:name}
TABLE_MARKER_PATTERN = re.compile(r"\$\{table:([^}]+)\}")

# ----------------------------
# 🖼️ Inline Images
# ----------------------------
IMAGE_DISPLAY_SIZE_PT = 150

# ----------------------------
# 📄 Output
# ----------------------------
DOCX_EXTENSION = ".docx"
PDF_EXTENSION = ".pdf"
HTML_EXTENSION = ".html"
TEMP_NAME_LENGTH = 7
HTML_FONT_FAMILY = "Noto Serif SC"

# ----------------------------
# 📨 Service Response Codes
# ----------------------------
RESPONSE_OK = 0
