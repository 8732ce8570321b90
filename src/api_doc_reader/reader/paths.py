"""URL path composition and path-template normalization."""

import re


def compose_path(class_path: str | None, method_path: str | None, parent_path: str | None = None) -> str | None:
    """Join parent, class and method paths into one absolute path.

    Returns None when none of the three is declared: such a method is not
    bound to any URL.
    """
    if class_path is None and method_path is None and not parent_path:
        return None

    result = ""
    if parent_path and parent_path != "/":
        result = "/" + parent_path.strip("/")
    if class_path is not None:
        if result and not class_path.startswith("/") and not result.endswith("/"):
            result += "/"
        result += class_path
    if method_path is not None and method_path != "/":
        if not method_path.startswith("/") and not result.endswith("/"):
            result += "/"
        result += method_path.rstrip("/")

    result = re.sub(r"/{2,}", "/", result)
    if not result.startswith("/"):
        result = "/" + result
    if len(result) > 1 and result.endswith("/"):
        result = result[:-1]
    return result


def parse_template(path: str) -> tuple[str, dict[str, str]]:
    """Strip ``{name: regex}`` patterns from a path template.

    Returns the path with bare ``{name}`` placeholders and a mapping of
    parameter name to regex for the placeholders that declared one.
    """
    patterns: dict[str, str] = {}
    out: list[str] = []
    i = 0
    while i < len(path):
        if path[i] != "{":
            out.append(path[i])
            i += 1
            continue

        depth = 0
        end = i
        while end < len(path):
            if path[end] == "{":
                depth += 1
            elif path[end] == "}":
                depth -= 1
                if depth == 0:
                    break
            end += 1

        name, sep, regex = path[i + 1:end].partition(":")
        name = name.strip()
        if sep and regex.strip():
            patterns[name] = regex.strip()
        out.append("{" + name + "}")
        i = end + 1
    return "".join(out), patterns
