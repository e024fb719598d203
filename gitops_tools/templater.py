"""Template evaluation for Jenkins job XML files.

Templates are evaluated in two passes:

1. The raw template is rendered by Jinja2 with the template data and a library
   of helper functions, available both as filters and as globals, e.g.
   ``{{ Repository | upper }}`` or ``{{ trimSuffix(".git", CloneURL) }}``.
   Statements and comments use ``{{% ... %}}`` and ``{{# ... #}}`` so that
   ``{%`` and ``{#`` in shell steps are plain text.
2. ``$Name`` and ``${Name}`` placeholders are replaced in the rendered text
   when ``Name`` is a template variable. Anything else, such as
   ``${env.BUILD_ID}``, ``${#ITEMS[@]}`` or ``$$``, is left untouched.
"""

import base64
import hashlib
import json
import re
from typing import Any, Callable, Dict, Mapping

import jinja2
import yaml

from .utils import TemplateError


def _b64enc(value: Any) -> str:
    return base64.b64encode(str(value).encode("utf-8")).decode("ascii")


def _b64dec(value: Any) -> str:
    return base64.b64decode(str(value)).decode("utf-8")


def _sha256sum(value: Any) -> str:
    return hashlib.sha256(str(value).encode("utf-8")).hexdigest()


def _indent(value: Any, spaces: int = 4) -> str:
    pad = " " * spaces
    return "\n".join(pad + line for line in str(value).split("\n"))


def _nindent(value: Any, spaces: int = 4) -> str:
    return "\n" + _indent(value, spaces)


def _trim_prefix(value: Any, prefix: str) -> str:
    text = str(value)
    return text[len(prefix):] if prefix and text.startswith(prefix) else text


def _trim_suffix(value: Any, suffix: str) -> str:
    text = str(value)
    return text[: -len(suffix)] if suffix and text.endswith(suffix) else text


def _words(value: Any) -> list:
    text = re.sub(r"([a-z0-9])([A-Z])", r"\1 \2", str(value))
    return [w.lower() for w in re.split(r"[^A-Za-z0-9]+", text) if w]


def _default(value: Any, default: Any = "") -> Any:
    return value if value not in (None, "") else default


def _to_yaml(value: Any) -> str:
    return yaml.safe_dump(value, default_flow_style=False).rstrip("\n")


# Filters take the piped value first: {{ CloneURL | trimSuffix(".git") }}
FILTERS: Dict[str, Callable[..., Any]] = {
    "upper": lambda v: str(v).upper(),
    "lower": lambda v: str(v).lower(),
    "title": lambda v: str(v).title(),
    "trim": lambda v: str(v).strip(),
    "trimPrefix": _trim_prefix,
    "trimSuffix": _trim_suffix,
    "replace": lambda v, old, new: str(v).replace(old, new),
    "default": _default,
    "quote": lambda v: json.dumps(str(v)),
    "squote": lambda v: "'" + str(v) + "'",
    "contains": lambda v, sub: sub in str(v),
    "hasPrefix": lambda v, prefix: str(v).startswith(prefix),
    "hasSuffix": lambda v, suffix: str(v).endswith(suffix),
    "b64enc": _b64enc,
    "b64dec": _b64dec,
    "sha256sum": _sha256sum,
    "indent": _indent,
    "nindent": _nindent,
    "toJson": lambda v: json.dumps(v),
    "toYaml": _to_yaml,
    "kebabcase": lambda v: "-".join(_words(v)),
    "snakecase": lambda v: "_".join(_words(v)),
}

# Globals take the value last, matching the usual template function order:
# {{ trimSuffix(".git", CloneURL) }}
GLOBALS: Dict[str, Callable[..., Any]] = {
    "upper": FILTERS["upper"],
    "lower": FILTERS["lower"],
    "title": FILTERS["title"],
    "trim": FILTERS["trim"],
    "trimPrefix": lambda prefix, v: _trim_prefix(v, prefix),
    "trimSuffix": lambda suffix, v: _trim_suffix(v, suffix),
    "replace": lambda old, new, v: str(v).replace(old, new),
    "default": lambda default, v: _default(v, default),
    "quote": FILTERS["quote"],
    "squote": FILTERS["squote"],
    "contains": lambda sub, v: sub in str(v),
    "hasPrefix": lambda prefix, v: str(v).startswith(prefix),
    "hasSuffix": lambda suffix, v: str(v).endswith(suffix),
    "b64enc": _b64enc,
    "b64dec": _b64dec,
    "sha256sum": _sha256sum,
    "indent": lambda spaces, v: _indent(v, spaces),
    "nindent": lambda spaces, v: _nindent(v, spaces),
    "toJson": FILTERS["toJson"],
    "toYaml": _to_yaml,
    "kebabcase": FILTERS["kebabcase"],
    "snakecase": FILTERS["snakecase"],
}


# Block and comment tags are doubled so that "{%" and "${#VAR}" in shell steps stay literal
BLOCK_START, BLOCK_END = "{{%", "%}}"
COMMENT_START, COMMENT_END = "{{#", "#}}"

# $Name or ${Name}; a "$$" is never treated as the start of a placeholder
PLACEHOLDER_RE = re.compile(
    r"(?<!\$)\$(?:\{(?P<braced>[A-Za-z_][A-Za-z0-9_]*)\}|(?P<named>[A-Za-z_][A-Za-z0-9_]*))"
)


def create_environment() -> jinja2.Environment:
    """Create the Jinja2 environment with the helper function library."""
    env = jinja2.Environment(
        block_start_string=BLOCK_START,
        block_end_string=BLOCK_END,
        comment_start_string=COMMENT_START,
        comment_end_string=COMMENT_END,
        undefined=jinja2.StrictUndefined,
        keep_trailing_newline=True,
        autoescape=False,
    )
    env.filters.update(FILTERS)
    env.globals.update(GLOBALS)
    return env


def substitute_placeholders(text: str, data: Mapping[str, Any]) -> str:
    """Replace the $Name and ${Name} placeholders whose name is in the data."""

    def _replace(match):
        key = match.group("braced") or match.group("named")
        if key not in data:
            return match.group(0)
        value = data[key]
        return "" if value is None else str(value)

    return PLACEHOLDER_RE.sub(_replace, text)


def evaluate(
    env: jinja2.Environment,
    data: Mapping[str, Any],
    template_text: str,
    template_file: str,
    description: str,
) -> str:
    """
    Evaluate a template against its data.

    Args:
        env: Environment from create_environment()
        data: Template variables
        template_text: Raw template contents
        template_file: Path of the template, used in error messages
        description: What the template is rendered for, e.g. "Jenkins Server ci1"

    Returns:
        The rendered text

    Raises:
        TemplateError: If the template cannot be parsed or rendered
    """
    try:
        rendered = env.from_string(template_text).render(**data)
    except (jinja2.TemplateError, TypeError, ValueError) as e:
        raise TemplateError(
            f"failed to evaluate template {template_file} for {description}: {e}"
        ) from e
    return substitute_placeholders(rendered, data)
