from pathlib import Path
from typing import Any, Iterable, Mapping, Union

from dbsampler.encoding import dumps_row, encode_row
from dbsampler.common.logger import get_logger

logger = get_logger(__name__)

PathLike = Union[str, Path]


class NdjsonWriter:
    """
    Writes encoded rows to a file, one JSON object per ``\\n``-terminated line.

    Every line is flushed as soon as it is written. The file is opened on
    ``__enter__`` and closed on every exit path.
    """

    def __init__(self, path: PathLike):
        self.path = Path(path)
        self.count = 0
        self._file = None

    def __enter__(self) -> "NdjsonWriter":
        self._file = open(self.path, "w", encoding="utf-8", newline="")
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
        if exc_type is not None:
            logger.warning(f"Stopped writing {self.path} after {self.count} rows: {exc}")

    def write_row(self, row: Mapping[str, Any]) -> None:
        if self._file is None:
            raise ValueError(f"NdjsonWriter for {self.path} is not open")
        self._file.write(dumps_row(encode_row(row)))
        self._file.write("\n")
        self._file.flush()
        self.count += 1

    def close(self) -> None:
        file, self._file = self._file, None
        if file is not None:
            file.close()


def write_ndjson(rows: Iterable[Mapping[str, Any]], path: PathLike) -> int:
    """Encodes ``rows`` and writes them to ``path``; returns the number of lines written."""
    with NdjsonWriter(path) as out:
        for row in rows:
            out.write_row(row)
    return out.count
