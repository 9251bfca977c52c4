"""
Record Reader

Line-oriented reader for the flat delimited record files. Fields are split
on the delimiter with no quoting or escaping, so a field that contains the
delimiter corrupts its row.
"""

from pathlib import Path
from typing import Iterator, List, Union

import structlog

logger = structlog.get_logger(__name__)

Record = List[str]


def split_record(line: str, delimiter: str = ",") -> Record:
    """
    Split one line into fields.

    Trailing empty fields are dropped, so a row written with a dangling
    delimiter (e.g. a person with no emails) has the same shape as one
    written without it.
    """
    fields = [value.strip() for value in line.rstrip("\r\n").split(delimiter)]
    while fields and fields[-1] == "":
        fields.pop()
    return fields


def iter_records(
    path: Union[str, Path],
    delimiter: str = ",",
    encoding: str = "utf-8",
) -> Iterator[Record]:
    """
    Yield the records of a file, header included.

    Blank lines are skipped. The file handle is held only while the
    iterator is being consumed and is released on every exit path.

    Raises:
        FileNotFoundError: If the file does not exist
    """
    path = Path(path)
    with open(path, "r", encoding=encoding, newline="") as fh:
        for line in fh:
            if not line.strip():
                continue
            yield split_record(line, delimiter)


def read_records(
    path: Union[str, Path],
    delimiter: str = ",",
    encoding: str = "utf-8",
) -> List[Record]:
    """Read every record of a file into memory, header included."""
    records = list(iter_records(path, delimiter=delimiter, encoding=encoding))
    logger.debug("Read records", file=str(path), records=len(records))
    return records
