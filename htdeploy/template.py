"""Service unit rendering by literal placeholder substitution."""

from __future__ import annotations

import logging
import re
from pathlib import Path

logger = logging.getLogger(__name__)

MANAGER_PLACEHOLDER = "@MANAGER@"
NAME_PLACEHOLDER = "@NAME@"
USER_PLACEHOLDER = "@USER@"

_PLACEHOLDER_RE = re.compile(r"@(MANAGER|NAME|USER)@")

# Quotes and newlines end the argument; systemd expands % specifiers,
# $VARIABLES and \ escapes even inside quotes
_FORBIDDEN_NAME_CHARS = frozenset('"\n%$\\')


class TemplateError(Exception):
    pass


def render_service_unit(template_text: str, manager: str, name: str, user: str) -> str:
    """Replace every placeholder in ``template_text`` in a single pass.

    The device name is quoted so that systemd keeps a name with spaces as a
    single ``ExecStart`` argument. Inserted values are never rescanned and
    nothing else in the template changes.
    """
    bad = sorted(_FORBIDDEN_NAME_CHARS.intersection(name))
    if bad:
        raise TemplateError(
            f"Device name may not contain {', '.join(repr(c) for c in bad)}: {name!r}"
        )
    values = {"MANAGER": manager, "NAME": f'"{name}"', "USER": user}
    return _PLACEHOLDER_RE.sub(lambda m: values[m.group(1)], template_text)


def render_service_file(
    template_path: str | Path,
    output_path: str | Path,
    manager: str,
    name: str,
    user: str,
) -> Path:
    """Render ``template_path`` into ``output_path`` (overwritten) and return it."""
    template_path = Path(template_path)
    output_path = Path(output_path)
    try:
        template_text = template_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise TemplateError(f"Service template not found: {template_path}") from None
    except UnicodeDecodeError as e:
        raise TemplateError(f"Service template is not UTF-8: {template_path}") from e

    rendered = render_service_unit(template_text, manager, name, user)
    output_path.write_text(rendered, encoding="utf-8")
    logger.debug("Rendered %s -> %s", template_path, output_path)
    return output_path
