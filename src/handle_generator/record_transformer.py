"""Record transformer: blog export in, Handle batch commands out."""

import io
import logging
import threading
from contextlib import nullcontext
from typing import Any, BinaryIO, Optional

from lxml import etree

from .config import ConversionOptions
from .error_handler import ErrorHandler
from .parser import ExportParser
from .profiler import PerformanceProfiler
from .templates import CommandSet, get_command_set, load_command_set
from .types import (
    ConversionError,
    ErrorType,
    HandleGeneratorError,
    RecordTransformerInterface,
    RenderContext,
    TransformResult,
)


class RecordTransformer(RecordTransformerInterface):
    """
    Turns the handle-annotated items of a blog export into Handle batch commands.

    Every selected item produces, in document order, the ``delete`` (only
    when ``add_delete`` is set), ``create``, ``admin`` and ``url`` commands
    followed by one blank line.

    Streams are owned by the caller and are never closed here. Runs on
    one instance are serialized; separate instances only share the
    read-only default command set.
    """

    def __init__(self, options: Optional[ConversionOptions] = None,
                 command_set: Optional[CommandSet] = None,
                 logger: Optional[logging.Logger] = None,
                 enable_profiling: bool = True):
        """
        Initialize the transformer.

        Args:
            options: Conversion options (prefix is checked when a run starts)
            command_set: Command templates; defaults to ``options.commands_file``
                or the packaged templates
            logger: Optional logger instance
            enable_profiling: Record duration and memory metrics of each run

        Raises:
            TemplateError: If the command templates cannot be loaded
        """
        self.logger = logger or logging.getLogger(__name__)
        self.options = options or ConversionOptions()
        self.command_set = command_set or self._load_commands(self.options)
        self.error_handler = ErrorHandler(self.logger)
        self.parser = ExportParser(self.logger)
        self.profiler = PerformanceProfiler(self.logger) if enable_profiling else None
        self._lock = threading.Lock()

    def configure(self, **changes: Any) -> ConversionOptions:
        """
        Replace some of the instance options.

        Waits for a running transform to finish first.

        Raises:
            TemplateError: If a new ``commands_file`` cannot be loaded
        """
        with self._lock:
            options = self.options.with_changes(**changes)
            if options.commands_file != self.options.commands_file:
                self.command_set = self._load_commands(options)
            self.options = options
            return options

    def transform(self, input_stream: BinaryIO, output_stream: BinaryIO,
                  options: Optional[ConversionOptions] = None) -> TransformResult:
        """
        Read an export from ``input_stream`` and write the batch to ``output_stream``.

        Args:
            input_stream: Binary stream with the XML export
            output_stream: Stream receiving the UTF-8 batch
            options: Options for this run only; defaults to the instance options

        Returns:
            TransformResult with item and line counts

        Raises:
            ConversionError: If the options are invalid, the input cannot be
                parsed, a limit is exceeded or the output cannot be written
            TemplateError: If ``options`` names a template file that cannot be loaded
        """
        with self._lock:
            options = options or self.options
            command_set = self.command_set
            if options.commands_file != self.options.commands_file:
                command_set = self._load_commands(options)
            return self._run(input_stream, output_stream, options, command_set)

    def _run(self, input_stream: BinaryIO, output_stream: BinaryIO,
             options: ConversionOptions, command_set: CommandSet) -> TransformResult:
        handle_filter = self.error_handler.compile_filter(options.filter)
        self.error_handler.check_options(options)

        self.logger.info(f"Starting transform: {options!r}")
        result = TransformResult()
        profile = self.profiler.profile_operation("transform") if self.profiler else nullcontext()

        completed = False
        with profile:
            try:
                root = self._parse(input_stream, options)

                for item in self.parser.select_items(root):
                    result.items_selected += 1
                    if options.max_items is not None and result.items_selected > options.max_items:
                        raise HandleGeneratorError(
                            f"Export holds more than {options.max_items} handle items",
                            ErrorType.LIMIT,
                            context={"max_items": options.max_items}
                        )

                    handle = item.handle
                    if not handle:
                        result.items_skipped += 1
                        self.logger.debug(f"Skipping {item.link}: empty handle")
                        continue
                    if handle_filter is not None and handle_filter.fullmatch(handle) is None:
                        result.items_filtered += 1
                        self.logger.debug(f"Skipping handle {handle}: does not match filter")
                        continue

                    context = RenderContext(
                        prefix=options.prefix,
                        handle=handle,
                        url=item.url_for(options.url_source)
                    )
                    lines = command_set.render_block(context, options.add_delete)
                    block = "".join(f"{line}\n" for line in lines) + "\n"
                    written = self._write(output_stream, block)

                    result.items_emitted += 1
                    result.lines_written += block.count("\n")
                    if self.profiler:
                        self.profiler.record(output_size=written, items=1)

                completed = True
            except ConversionError:
                raise
            except HandleGeneratorError as e:
                raise self.error_handler.wrap(e, e.error_type, "Conversion failed") from e
            except (OSError, ValueError) as e:
                # ValueError: write to a closed stream
                raise self.error_handler.wrap(e, ErrorType.IO, "Could not write batch") from e
            finally:
                self._flush(output_stream, raise_errors=completed)

        self.logger.info(f"Transform finished: {result.items_emitted} of "
                         f"{result.items_selected} handle items written")
        return result

    def _parse(self, input_stream: BinaryIO, options: ConversionOptions) -> etree._Element:
        try:
            data = self.parser.read(input_stream, options.max_input_bytes)
            if self.profiler:
                self.profiler.record(input_size=len(data))
            return self.parser.parse(data)
        except HandleGeneratorError as e:
            raise self.error_handler.wrap(e, e.error_type, "Could not read export") from e
        except (OSError, ValueError, etree.XMLSyntaxError) as e:
            raise self.error_handler.wrap(e, ErrorType.PARSE, "Could not parse export") from e

    def _flush(self, output_stream: BinaryIO, raise_errors: bool):
        """
        Flush the output stream.

        A failed flush is raised as a ConversionError after a complete run;
        after a failed run it is only logged so the original error surfaces.
        """
        try:
            output_stream.flush()
        except (OSError, ValueError) as e:
            if raise_errors:
                raise self.error_handler.wrap(e, ErrorType.IO, "Could not flush batch") from e
            self.logger.error(f"Could not flush batch after a failed run: {e}")

    @staticmethod
    def _write(output_stream: BinaryIO, text: str) -> int:
        """
        Write UTF-8 text to a binary stream, or str to a text stream.

        Text streams are io text streams or streams with an ``encoding``;
        binary files opened by click carry ``encoding=None``.
        """
        data = text.encode("utf-8")
        if isinstance(output_stream, io.TextIOBase) or getattr(output_stream, "encoding", None):
            output_stream.write(text)
        else:
            output_stream.write(data)
        return len(data)

    @staticmethod
    def _load_commands(options: ConversionOptions) -> CommandSet:
        if options.commands_file:
            return load_command_set(options.commands_file)
        return get_command_set()
