"""
Actor id mapping for the remnet library.

Events, network state and statistics identify actors by integer ids. Input
tables frequently identify actors by names, e-mail addresses or other
labels; ActorMapper assigns consecutive integer ids to such labels at the
ingestion boundary and translates results back.
"""

from typing import Any, Dict, Iterable, List


class ActorMapper:
    """
    Bidirectional mapping between external actor labels and integer actor ids.

    Ids are assigned consecutively in first-seen order, starting from
    ``start``.

    Attributes
    ----------
    label_to_id : Dict[Any, int]
        Maps external labels to actor ids
    id_to_label : Dict[int, Any]
        Maps actor ids back to external labels

    Examples
    --------
    >>> mapper = ActorMapper()
    >>> mapper.get_or_assign("alice")
    0
    >>> mapper.get_or_assign("bob")
    1
    >>> mapper.get_or_assign("alice")
    0
    >>> mapper.get_label(1)
    'bob'
    """

    def __init__(self, start: int = 0) -> None:
        if not isinstance(start, int) or start < 0:
            raise ValueError(f"start must be a non-negative integer, got {start!r}")
        self.start = start
        self.label_to_id: Dict[Any, int] = {}
        self.id_to_label: Dict[int, Any] = {}

    def get_or_assign(self, label: Any) -> int:
        """
        Return the id of ``label``, assigning the next free id if it is new.

        Raises
        ------
        TypeError
            If label is not hashable
        """
        try:
            existing = self.label_to_id.get(label)
        except TypeError:
            raise TypeError(f"Actor label must be hashable, got {type(label)}")
        if existing is not None:
            return existing

        actor_id = self.start + len(self.label_to_id)
        self.label_to_id[label] = actor_id
        self.id_to_label[actor_id] = label
        return actor_id

    def assign_all(self, labels: Iterable[Any]) -> List[int]:
        """Map a batch of labels, assigning ids to the ones not seen before."""
        return [self.get_or_assign(label) for label in labels]

    def get_id(self, label: Any) -> int:
        """
        Return the id of a known label.

        Raises
        ------
        KeyError
            If the label has never been assigned an id
        """
        try:
            return self.label_to_id[label]
        except KeyError:
            raise KeyError(f"Actor label '{label}' not found in mapping")

    def get_label(self, actor_id: int) -> Any:
        """
        Return the external label of an actor id.

        Raises
        ------
        KeyError
            If the id is unknown
        """
        try:
            return self.id_to_label[actor_id]
        except KeyError:
            raise KeyError(f"Actor id {actor_id} not found in mapping")

    def get_labels(self, actor_ids: Iterable[int]) -> List[Any]:
        """Translate a batch of actor ids back to labels."""
        return [self.get_label(actor_id) for actor_id in actor_ids]

    def has_label(self, label: Any) -> bool:
        return label in self.label_to_id

    def has_id(self, actor_id: int) -> bool:
        return actor_id in self.id_to_label

    def to_dict(self) -> Dict[str, Any]:
        """
        Export the mapping for serialization.

        Ids are stored as strings in the reverse mapping so the result
        survives a JSON round trip.
        """
        return {
            "start": self.start,
            "label_to_id": dict(self.label_to_id),
            "id_to_label": {str(k): v for k, v in self.id_to_label.items()},
        }

    @classmethod
    def from_dict(cls, mapping: Dict[str, Any]) -> "ActorMapper":
        """
        Rebuild a mapper exported with :meth:`to_dict`.

        Raises
        ------
        KeyError
            If required keys are missing
        ValueError
            If the two directions of the mapping disagree
        """
        try:
            label_to_id = mapping["label_to_id"]
            id_to_label_raw = mapping["id_to_label"]
        except KeyError as e:
            raise KeyError(f"Missing required key in mapping dictionary: {e}")

        id_to_label = {int(k): v for k, v in id_to_label_raw.items()}
        if len(label_to_id) != len(id_to_label):
            raise ValueError(
                f"Inconsistent mapping sizes: {len(label_to_id)} vs {len(id_to_label)}"
            )

        mapper = cls(start=int(mapping.get("start", 0)))
        for label, actor_id in label_to_id.items():
            if id_to_label.get(actor_id) != label:
                raise ValueError(
                    f"Inconsistent mapping: label '{label}' -> {actor_id}, "
                    f"but {actor_id} -> '{id_to_label.get(actor_id)}'"
                )
            mapper.label_to_id[label] = actor_id
            mapper.id_to_label[actor_id] = label
        return mapper

    def __len__(self) -> int:
        return len(self.label_to_id)

    def __contains__(self, label: Any) -> bool:
        return self.has_label(label)

    def __repr__(self) -> str:
        return f"ActorMapper(size={len(self)}, start={self.start})"
