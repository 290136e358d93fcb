"""Encode and decode tasks for storage and file exchange.

A task is written as a JSON object with named fields:

    {"id": 3229...,                      # unsigned 128-bit integer
     "creationtime": "2024-03-01T09:30:00Z",
     "name": "...", "description": "...",
     "started": "..." | null, "finished": "..." | null,
     "subtasks": [1234..., ...] | null}

and a task set as a JSON array of such objects. Decoding also accepts the
positional form, an array holding the same values in the same order.

Two earlier schema generations are still readable: one written before
tasks had a creation time and one written before tasks had subtasks. Each
generation is a SchemaGeneration with its own field list, so every decoder
can be exercised on its own.
"""
import json
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union
from uuid import UUID

from errors import DuplicateField, InvalidField, MalformedInput, MissingField, UnknownField
from models import SubtaskRef, Task
from utils.time_utils import format_timestamp, parse_timestamp, utc_now

logger = logging.getLogger(__name__)

FIELD_ID = "id"
FIELD_CREATION_TIME = "creationtime"
FIELD_NAME = "name"
FIELD_DESCRIPTION = "description"
FIELD_STARTED = "started"
FIELD_FINISHED = "finished"
FIELD_SUBTASKS = "subtasks"

MAX_ID = 2 ** 128


class FieldPairs:
    """Key/value pairs of one JSON object, in document order.

    Used as the json object_pairs_hook so repeated keys survive parsing and
    can be reported instead of silently collapsing into the last value.
    """

    def __init__(self, pairs: Iterable[Tuple[str, Any]]):
        self.pairs = list(pairs)

    def __repr__(self) -> str:
        return f"FieldPairs({self.pairs!r})"


@dataclass(frozen=True)
class SchemaGeneration:
    """One version of the task document layout.

    Attributes:
        name: Label used in log messages
        fields: Field names in positional order
        omitted: Field of the current layout this generation lacks, if any
    """
    name: str
    fields: Tuple[str, ...]
    omitted: Optional[str] = None

    def collect(self, value: Any) -> Dict[str, Any]:
        """
        Gather raw field values from a named or positional document.

        Raises:
            MissingField: A field of this generation is absent
            DuplicateField: A field appears twice
            UnknownField: A field is not part of this generation
            MalformedInput: The value is neither an object nor an array
        """
        if isinstance(value, FieldPairs):
            return self._collect_pairs(value.pairs)
        if isinstance(value, Mapping):
            return self._collect_pairs(value.items())
        if isinstance(value, (list, tuple)):
            return self._collect_positional(value)
        raise MalformedInput(None, f"expected a task object or array, got {type(value).__name__}")

    def _collect_pairs(self, pairs: Iterable[Tuple[Any, Any]]) -> Dict[str, Any]:
        values = {}
        for key, raw in pairs:
            if key not in self.fields:
                raise UnknownField(str(key))
            if key in values:
                raise DuplicateField(key)
            values[key] = raw

        for name in self.fields:
            if name not in values:
                raise MissingField(name)
        return values

    def _collect_positional(self, items: Sequence[Any]) -> Dict[str, Any]:
        if len(items) < len(self.fields):
            raise MissingField(self.fields[len(items)])
        if len(items) > len(self.fields):
            raise UnknownField(f"[{len(self.fields)}]", "unexpected positional value")
        return dict(zip(self.fields, items))

    def decode(self, value: Any) -> Task:
        """Decode one task document laid out in this generation."""
        values = self.collect(value)
        task_id = _decode_id(values[FIELD_ID], FIELD_ID)

        if FIELD_CREATION_TIME in values:
            creation_time = _decode_timestamp(values[FIELD_CREATION_TIME], FIELD_CREATION_TIME)
        else:
            creation_time = utc_now()
            logger.warning(
                "Task %s has no creation time (%s schema); using current time",
                task_id, self.name,
            )

        task = Task(
            id=task_id,
            creation_time=creation_time,
            name=_decode_text(values[FIELD_NAME], FIELD_NAME),
            description=_decode_text(values[FIELD_DESCRIPTION], FIELD_DESCRIPTION),
            started=_decode_optional_timestamp(values[FIELD_STARTED], FIELD_STARTED),
            finished=_decode_optional_timestamp(values[FIELD_FINISHED], FIELD_FINISHED),
            subtasks=_decode_subtasks(values.get(FIELD_SUBTASKS)),
        )
        _check_lifecycle(task)
        return task


CURRENT = SchemaGeneration(
    "current",
    (FIELD_ID, FIELD_CREATION_TIME, FIELD_NAME, FIELD_DESCRIPTION,
     FIELD_STARTED, FIELD_FINISHED, FIELD_SUBTASKS),
)
NO_SUBTASKS = SchemaGeneration(
    "no-subtasks",
    (FIELD_ID, FIELD_CREATION_TIME, FIELD_NAME, FIELD_DESCRIPTION,
     FIELD_STARTED, FIELD_FINISHED),
    omitted=FIELD_SUBTASKS,
)
NO_CREATION_TIME = SchemaGeneration(
    "no-creationtime",
    (FIELD_ID, FIELD_NAME, FIELD_DESCRIPTION,
     FIELD_STARTED, FIELD_FINISHED, FIELD_SUBTASKS),
    omitted=FIELD_CREATION_TIME,
)

GENERATIONS = (CURRENT, NO_SUBTASKS, NO_CREATION_TIME)
LEGACY_GENERATIONS = {g.omitted: g for g in GENERATIONS if g.omitted is not None}


def _decode_id(raw: Any, field_name: str) -> UUID:
    # bool is an int subclass; true/false are not ids
    if isinstance(raw, bool) or not isinstance(raw, int):
        raise InvalidField(field_name, f"expected an unsigned 128-bit integer, got {type(raw).__name__}")
    if not 0 <= raw < MAX_ID:
        raise InvalidField(field_name, f"{raw} is outside the unsigned 128-bit range")
    return UUID(int=raw)


def _decode_text(raw: Any, field_name: str) -> str:
    if not isinstance(raw, str):
        raise InvalidField(field_name, f"expected a string, got {type(raw).__name__}")
    try:
        raw.encode("utf-8")
    except UnicodeEncodeError as e:
        # JSON allows lone surrogate escapes; they cannot be written back
        raise InvalidField(field_name, "not valid Unicode text (lone surrogate)") from e
    return raw


def _decode_timestamp(raw: Any, field_name: str) -> datetime:
    if not isinstance(raw, str):
        raise InvalidField(field_name, f"expected a timestamp string, got {type(raw).__name__}")
    try:
        return parse_timestamp(raw)
    except ValueError as e:
        raise InvalidField(field_name, f"invalid timestamp {raw!r}") from e


def _decode_optional_timestamp(raw: Any, field_name: str) -> Optional[datetime]:
    if raw is None:
        return None
    return _decode_timestamp(raw, field_name)


def _decode_subtasks(raw: Any) -> Optional[List[SubtaskRef]]:
    if raw is None:
        return None
    if not isinstance(raw, (list, tuple)):
        raise InvalidField(FIELD_SUBTASKS, f"expected a list of ids, got {type(raw).__name__}")

    refs = []
    seen = set()
    for position, item in enumerate(raw):
        try:
            task_id = _decode_id(item, FIELD_SUBTASKS)
        except InvalidField as e:
            raise InvalidField(FIELD_SUBTASKS, f"element {position}: {e.reason}") from e
        if task_id in seen:
            raise InvalidField(FIELD_SUBTASKS, f"element {position}: duplicate reference {item}")
        seen.add(task_id)
        # Names are not persisted; the registry fills them in after loading.
        refs.append(SubtaskRef(task_id))
    return refs


def _check_lifecycle(task: Task):
    """Reject decoded states that start() and finish() can never produce."""
    if task.finished is not None:
        if task.started is None:
            raise InvalidField(FIELD_FINISHED, "set although 'started' is null")
        if task.finished < task.started:
            raise InvalidField(FIELD_FINISHED, "earlier than 'started'")
    if task.has_subtask(task.id):
        raise InvalidField(FIELD_SUBTASKS, "task references itself")


def encode_task(task: Task) -> Dict[str, Any]:
    """
    Encode a task as a field-tagged mapping.

    Ids are written as unsigned 128-bit integers and subtask references keep
    their order. A task without subtasks is written with ``null``; an empty
    subtask list is written as ``[]``.

    Args:
        task: The task to encode

    Returns:
        Mapping ready for json.dumps
    """
    return {
        FIELD_ID: task.id.int,
        FIELD_CREATION_TIME: format_timestamp(task.creation_time),
        FIELD_NAME: task.name,
        FIELD_DESCRIPTION: task.description,
        FIELD_STARTED: format_timestamp(task.started) if task.started else None,
        FIELD_FINISHED: format_timestamp(task.finished) if task.finished else None,
        FIELD_SUBTASKS: None if task.subtasks is None else [ref.id.int for ref in task.subtasks],
    }


def decode_task(value: Any) -> Task:
    """
    Decode one task from a named or positional document.

    Named documents are read with the current schema first. If that fails
    only because a field introduced by a later generation is missing, the
    matching legacy generation is used instead. Positional documents are
    matched to the generations by their length.

    Args:
        value: Mapping, FieldPairs or list/tuple of field values

    Returns:
        The decoded Task

    Raises:
        MalformedInput: If no known generation can decode the document
    """
    if isinstance(value, (list, tuple)):
        return _decode_positional(value)

    try:
        return CURRENT.decode(value)
    except MissingField as e:
        legacy = LEGACY_GENERATIONS.get(e.field)
        if legacy is None:
            raise
        task = legacy.decode(value)
        logger.info("Decoded task %s with %s schema", task.id, legacy.name)
        return task


def _decode_positional(items: Sequence[Any]) -> Task:
    candidates = [g for g in GENERATIONS if len(g.fields) == len(items)]
    if not candidates:
        # Raises the appropriate missing/unknown field error
        return CURRENT.decode(items)

    first_error = None
    for generation in candidates:
        try:
            task = generation.decode(items)
        except MalformedInput as e:
            if first_error is None:
                first_error = e
            continue
        if generation is not CURRENT:
            logger.info("Decoded positional task %s with %s schema", task.id, generation.name)
        return task
    raise first_error


def serialize_all(tasks: Iterable[Task], indent: Optional[int] = None) -> str:
    """
    Serialize a task set to JSON text.

    Args:
        tasks: Tasks to write, in the order they should appear
        indent: Optional indentation for human-readable export files

    Returns:
        JSON array of encoded tasks
    """
    return json.dumps([encode_task(task) for task in tasks], indent=indent, ensure_ascii=False)


def deserialize_all(text: Union[str, bytes]) -> List[Task]:
    """
    Deserialize a task set from JSON text.

    Decoding is all-or-nothing: the first malformed document aborts the
    whole set.

    Args:
        text: JSON array of task documents, as text or UTF-8 bytes

    Returns:
        List of decoded tasks in document order

    Raises:
        MalformedInput: If the text is not JSON, is not an array, or any
            document fails to decode (annotated with its index)
    """
    if isinstance(text, bytes):
        try:
            text = text.decode("utf-8")
        except UnicodeDecodeError as e:
            raise MalformedInput(None, f"not UTF-8 text: {e}") from e

    try:
        documents = json.loads(text, object_pairs_hook=FieldPairs)
    except ValueError as e:
        raise MalformedInput(None, f"invalid JSON: {e}") from e
    except RecursionError as e:
        raise MalformedInput(None, "invalid JSON: nested too deeply") from e

    if not isinstance(documents, list):
        raise MalformedInput(None, "expected a JSON array of tasks")

    tasks = []
    for index, document in enumerate(documents):
        try:
            tasks.append(decode_task(document))
        except MalformedInput as e:
            raise e.at_index(index) from e
    return tasks
