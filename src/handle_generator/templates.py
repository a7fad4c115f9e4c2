"""Command templates for the Handle batch file."""

import logging
import threading
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from string import Template
from typing import Dict, List, Optional, Union

import javaproperties

from .types import ErrorType, HandleGeneratorError, RenderContext, TemplateError
from .utils.validation import ValidationUtils


logger = logging.getLogger(__name__)

COMMAND_NAMES = ("delete", "create", "admin", "url")
COMMAND_KEY_PREFIX = "command."
DEFAULT_RESOURCE = "commands.properties"


class CommandTemplate(Template):
    """
    A ``string.Template`` that only recognizes the braced ``${name}`` form.

    A ``$`` that does not open a ``${name}`` placeholder is literal text,
    so templates are rendered by plain placeholder replacement.
    """

    pattern = r"""
    \$(?:
      (?P<escaped>(?!))                   |
      (?P<named>(?!))                     |
      {(?P<braced>[_a-z][_a-z0-9]*)}      |
      (?P<invalid>(?!))
    )
    """

    def placeholders(self) -> List[str]:
        return [match.group("braced") for match in self.pattern.finditer(self.template)]


@dataclass(frozen=True)
class CommandSet:
    """The four command templates of a Handle batch block."""
    delete: CommandTemplate
    create: CommandTemplate
    admin: CommandTemplate
    url: CommandTemplate
    source: str = DEFAULT_RESOURCE

    def render(self, name: str, context: RenderContext) -> str:
        """
        Render a single command.

        Raises:
            HandleGeneratorError: If the template references an unknown placeholder
        """
        template: CommandTemplate = getattr(self, name)
        try:
            return template.substitute(context.as_mapping())
        except KeyError as e:
            raise HandleGeneratorError(
                f"Template 'command.{name}' references unknown placeholder {e}",
                ErrorType.SUBSTITUTION,
                context={"command": name}
            ) from e

    def render_block(self, context: RenderContext, add_delete: bool = False) -> List[str]:
        """Render the commands of one item in batch order."""
        names = COMMAND_NAMES if add_delete else COMMAND_NAMES[1:]
        return [self.render(name, context) for name in names]

    def as_dict(self) -> Dict[str, str]:
        return {name: getattr(self, name).template for name in COMMAND_NAMES}


def parse_properties(text: str, source: str = "<string>") -> Dict[str, str]:
    """
    Parse a Java properties document.

    Line continuations, ``\\n`` and ``\\uXXXX`` escapes follow the Java
    format; a key defined twice keeps its last value.

    Raises:
        TemplateError: If the document cannot be parsed
    """
    try:
        return javaproperties.loads(text)
    except ValueError as e:
        raise TemplateError(f"Could not parse command templates from {source}: {e}",
                            context={"source": source}) from e


def build_command_set(properties: Dict[str, str], source: str = "<string>") -> CommandSet:
    """
    Build a validated command set from parsed properties.

    Raises:
        TemplateError: If a command is missing or uses unknown placeholders
    """
    templates = {}
    problems = []
    for name in COMMAND_NAMES:
        key = COMMAND_KEY_PREFIX + name
        if key not in properties:
            problems.append(f"missing key '{key}'")
            continue
        template = CommandTemplate(properties[key])
        result = ValidationUtils.validate_template(key, template.placeholders())
        problems.extend(error.message for error in result.errors)
        templates[name] = template

    if problems:
        raise TemplateError(f"Invalid command templates in {source}: {'; '.join(problems)}",
                            context={"source": source, "problems": problems})

    return CommandSet(source=source, **templates)


def load_command_set(path: Optional[Union[str, Path]] = None) -> CommandSet:
    """
    Load command templates from a file, or from the packaged defaults.

    Raises:
        TemplateError: If the resource is missing, unreadable or invalid
    """
    try:
        if path is None:
            source = DEFAULT_RESOURCE
            text = resources.files(__package__).joinpath(DEFAULT_RESOURCE).read_text(encoding="utf-8")
        else:
            source = str(path)
            text = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise TemplateError(f"Could not read command templates: {e}",
                            context={"source": str(path or DEFAULT_RESOURCE)}) from e

    command_set = build_command_set(parse_properties(text, source), source)
    logger.debug(f"Loaded command templates from {source}")
    return command_set


_default_command_set: Optional[CommandSet] = None
_default_lock = threading.Lock()


def get_command_set() -> CommandSet:
    """Return the packaged command set, loading it on first use."""
    global _default_command_set
    if _default_command_set is None:
        with _default_lock:
            if _default_command_set is None:
                _default_command_set = load_command_set()
    return _default_command_set
