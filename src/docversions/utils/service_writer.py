import asyncio
import json
from pathlib import Path
from string import Template
from typing import Dict, Iterable, List, Optional, Set, Union

from ..models.record import ServiceRecord
from .exceptions import OutputError
from .logger import LogMe

TEMPLATE_DIR = Path(__file__).parent.parent / "templates"


class ServiceWriter:
    def __init__(self, output_dir: Union[str, Path], template_dir: Optional[Path] = None):
        """
        Renders service records into files served with the documentation.

        ``js`` output wraps each record's value in an angular module (see ``templates/``),
        ``json`` output writes the bare record next to it.

        :param output_dir: Directory the records' ``output_path`` values are resolved against.
        :type output_dir: :py:obj:`~typing.Union` [:py:class:`str` | :py:obj:`~pathlib.Path`]
        :param template_dir: Directory holding record templates. Defaults to the bundled templates.
        :type template_dir: :py:obj:`~typing.Optional` [:py:obj:`~pathlib.Path`]
        """
        self.output_dir = Path(output_dir).expanduser()
        self.template_dir = template_dir or TEMPLATE_DIR
        self.log = LogMe(self.__class__.__name__)

    def _target(self, record: ServiceRecord, suffix: str) -> Path:
        return (self.output_dir / record.output_path).with_suffix(suffix)

    def render(self, record: ServiceRecord) -> str:
        """
        Renders a record with its template.

        :param record: The record to render.
        :type record: :class:`~docversions.models.record.ServiceRecord`
        :return: The rendered file contents.
        :rtype: :py:class:`str`
        :raises OutputError: If the template is missing or references unknown placeholders.
        """
        template_path = self.template_dir / record.template
        try:
            template = Template(template_path.read_text(encoding="utf-8"))
            return template.substitute(
                ng_module_name=record.ng_module_name,
                service_name=record.service_name,
                service_value=json.dumps(record.service_value, indent=2),
            )
        except (OSError, KeyError, ValueError) as e:
            raise OutputError(
                "Unable to render service record.",
                record=record.id,
                template=str(template_path),
                error_msg=str(e),
            )

    async def _write(self, path: Path, content: str) -> None:
        try:
            await asyncio.to_thread(path.parent.mkdir, parents=True, exist_ok=True)
            await asyncio.to_thread(lambda: path.write_text(content, encoding="utf-8"))
        except OSError as e:
            raise OutputError("Error saving service file.", file_path=str(path), error_msg=str(e))
        self.log.info(f"Service file written to {path}")

    async def write(
        self, records: Iterable[ServiceRecord], formats: Optional[Set[str]] = None
    ) -> Dict[str, List[str]]:
        """
        Writes records in the requested formats.

        :param records: The records to write.
        :type records: :py:obj:`~typing.Iterable` [:class:`~docversions.models.record.ServiceRecord`]
        :param formats: Any of ``js`` and ``json``, as validated by
            :class:`~docversions.models.settings.BuildSettings`. Defaults to ``{"js"}``.
        :type formats: :py:obj:`~typing.Optional` [:py:obj:`~typing.Set` [:py:class:`str`]]
        :return: Written file paths keyed by format.
        :rtype: :py:obj:`~typing.Dict` [:py:class:`str`, :py:obj:`~typing.List` [:py:class:`str`]]
        :raises OutputError: If a file cannot be written.
        """
        selected = set(formats or {"js"})
        written: Dict[str, List[str]] = {fmt: [] for fmt in sorted(selected)}
        for record in records:
            if "js" in selected:
                path = self._target(record, ".js")
                await self._write(path, self.render(record))
                written["js"].append(str(path))
            if "json" in selected:
                path = self._target(record, ".json")
                content = json.dumps(record.model_dump(mode="json", by_alias=True), indent=2)
                await self._write(path, content)
                written["json"].append(str(path))
        return written
