import re

# C0 controls and DEL, except tab, line feed and carriage return
CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")


def strip_control_chars(text: str) -> str:
    return CONTROL_CHARS.sub("", text)
