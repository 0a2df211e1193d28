import re


def redact_log(text: str) -> str:
    """
    Mask anything that looks like a credential before it reaches the logs.
    """
    if not isinstance(text, str):
        text = str(text)
    return re.sub(
        r"(api|key|token|secret|license)[^\s\"']+", "***REDACTED***", text, flags=re.IGNORECASE
    )
