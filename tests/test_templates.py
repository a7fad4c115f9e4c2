"""Tests for command templates."""

import pytest

from handle_generator.templates import (
    CommandSet,
    CommandTemplate,
    build_command_set,
    get_command_set,
    load_command_set,
    parse_properties,
)
from handle_generator.types import ErrorType, HandleGeneratorError, RenderContext, TemplateError


VALID_PROPERTIES = """\
# comment
! another comment
command.delete=DELETE ${prefix}/${handle}
command.create = CREATE ${prefix}/${handle}
command.admin: ADMIN ${prefix}
command.url=URL ${url}
"""


class TestCommandTemplate:
    """Tests for CommandTemplate class."""

    def test_braced_placeholders(self):
        """Test that only ${name} placeholders are recognized."""
        template = CommandTemplate("A ${prefix}/${handle} $url $$ ${url}")

        assert template.placeholders() == ["prefix", "handle", "url"]

    def test_bare_dollar_is_literal(self):
        """Test that stray dollars are kept as is."""
        template = CommandTemplate("cost $5 and $$ for ${handle}")

        assert template.substitute({"handle": "1"}) == "cost $5 and $$ for 1"


class TestCommandSet:
    """Tests for CommandSet class."""

    def setup_method(self):
        """Set up test fixtures."""
        self.command_set = build_command_set(parse_properties(VALID_PROPERTIES))
        self.context = RenderContext(prefix="20.500.1", handle="7", url="http://x/7")

    def test_render(self):
        """Test rendering single commands."""
        assert self.command_set.render("create", self.context) == "CREATE 20.500.1/7"
        assert self.command_set.render("url", self.context) == "URL http://x/7"

    def test_render_block_order(self):
        """Test the command order of a block."""
        assert self.command_set.render_block(self.context) == [
            "CREATE 20.500.1/7", "ADMIN 20.500.1", "URL http://x/7"
        ]
        assert self.command_set.render_block(self.context, add_delete=True)[0] == "DELETE 20.500.1/7"

    def test_unknown_placeholder_at_render(self):
        """Test that rendering an unvalidated template fails."""
        command_set = CommandSet(
            delete=CommandTemplate("D"), create=CommandTemplate("C ${other}"),
            admin=CommandTemplate("A"), url=CommandTemplate("U")
        )

        with pytest.raises(HandleGeneratorError) as excinfo:
            command_set.render("create", self.context)

        assert excinfo.value.error_type == ErrorType.SUBSTITUTION

    def test_command_set_is_immutable(self):
        """Test that templates cannot be replaced."""
        with pytest.raises(AttributeError):
            self.command_set.create = CommandTemplate("X")


class TestLoading:
    """Tests for template loading."""

    def test_parse_properties_delimiters(self):
        """Test '=' and ':' delimiters and comments."""
        properties = parse_properties(VALID_PROPERTIES)

        assert properties["command.create"] == "CREATE ${prefix}/${handle}"
        assert properties["command.admin"] == "ADMIN ${prefix}"
        assert len(properties) == 4

    def test_keys_are_case_sensitive(self):
        """Test that property keys keep their case."""
        assert parse_properties("Command.URL=x") == {"Command.URL": "x"}

    def test_duplicate_key_keeps_last_value(self):
        """Test that a key defined twice keeps its last value."""
        assert parse_properties("command.url=a\ncommand.url=b\n") == {"command.url": "b"}

    def test_line_continuation(self):
        """Test that a trailing backslash joins the next line."""
        properties = parse_properties("command.url=A \\\n    B\n")

        assert properties == {"command.url": "A B"}

    def test_escapes(self):
        """Test newline and unicode escapes."""
        properties = parse_properties("command.url=x\\ny\ncommand.admin=G\\u00f3mez\n")

        assert properties["command.url"] == "x\ny"
        assert properties["command.admin"] == "G\u00f3mez"

    def test_multi_line_template(self):
        """Test a template rendering to several batch lines."""
        text = VALID_PROPERTIES.replace(
            "command.admin: ADMIN ${prefix}",
            "command.admin: ADMIN ${prefix}\\n\\\n    VLIST ${prefix}/${handle}"
        )
        command_set = build_command_set(parse_properties(text))
        context = RenderContext(prefix="20.500.1", handle="7", url="http://x/7")

        assert command_set.render("admin", context) == "ADMIN 20.500.1\nVLIST 20.500.1/7"

    def test_semicolon_is_not_a_comment(self):
        """Test that only '#' and '!' start comments."""
        assert parse_properties(";key=value\n") == {";key": "value"}

    def test_invalid_unicode_escape(self):
        """Test that a broken escape is a template error."""
        with pytest.raises(TemplateError, match="Could not parse"):
            parse_properties("command.url=\\u12\n")

    def test_missing_command(self):
        """Test that every command must be defined."""
        text = VALID_PROPERTIES.replace("command.admin: ADMIN ${prefix}\n", "")

        with pytest.raises(TemplateError, match="command.admin"):
            build_command_set(parse_properties(text))

    def test_unknown_placeholder_at_load(self):
        """Test that unknown placeholders are rejected when loading."""
        text = VALID_PROPERTIES.replace("URL ${url}", "URL ${link}")

        with pytest.raises(TemplateError) as excinfo:
            build_command_set(parse_properties(text))

        assert "link" in str(excinfo.value)
        assert excinfo.value.error_type == ErrorType.TEMPLATE

    def test_load_packaged_defaults(self):
        """Test the packaged command templates."""
        command_set = load_command_set()
        context = RenderContext(prefix="20.500.12345", handle="123", url="http://x/1")

        assert command_set.render_block(context, add_delete=True) == [
            "DELETE 20.500.12345/123",
            "CREATE 20.500.12345/123",
            "100 HS_ADMIN 86400 1110 ADMIN 200:111111111111:20.500.12345/123\n"
            "200 HS_VLIST 86400 1110 LIST 300:0.NA/20.500.12345;",
            "1 URL 86400 1110 UTF8 http://x/1",
        ]

    def test_load_from_file(self, temp_dir):
        """Test loading templates from a file."""
        path = temp_dir / "commands.properties"
        path.write_text(VALID_PROPERTIES, encoding="utf-8")

        command_set = load_command_set(path)

        assert command_set.source == str(path)
        assert command_set.as_dict()["admin"] == "ADMIN ${prefix}"

    def test_load_missing_file(self, temp_dir):
        """Test loading a file that does not exist."""
        with pytest.raises(TemplateError, match="Could not read"):
            load_command_set(temp_dir / "missing.properties")

    def test_default_set_is_shared(self):
        """Test that the default command set is loaded once."""
        assert get_command_set() is get_command_set()
