"""
Static metric descriptors.

The table is built once at startup and never changes afterwards; any key
the registry holds without a descriptor is reported at collect time.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, Mapping, Optional, Sequence, Tuple

from .value import MetricKind

KEY_PREFIX = "cassini_"

KEY_QUEUE_SIZE = "queue_size"
KEY_QUEUE = "queue"
KEY_ADAPTORS = "adaptors"
KEY_TXS_WAIT = "txs_wait"
KEY_TX_COST = "tx_cost"
KEY_TXS_PER_SECOND = "txs_per_second"
KEY_ERRORS = "errors"


@dataclass(frozen=True)
class Descriptor:
    """Name, help text and label names of one metric."""
    name: str
    help: str
    label_names: Tuple[str, ...] = ()
    kind: MetricKind = MetricKind.GAUGE


class DescriptorTable(Mapping[str, Descriptor]):
    """Immutable key -> Descriptor mapping."""

    def __init__(
        self,
        entries: Iterable[Sequence],
        prefix: str = KEY_PREFIX,
    ):
        """
        Build the table.

        Args:
            entries: (key, name, help, label_names[, kind]) tuples. The name
                is prefixed with ``prefix``; kind defaults to gauge and only
                sets the type announced by describe().
            prefix: Metric name prefix.

        Raises:
            ValueError: If a key appears twice.
        """
        descs: Dict[str, Descriptor] = {}
        for key, name, help_text, label_names, *rest in entries:
            if key in descs:
                raise ValueError(f"Duplicate descriptor key: {key}")
            descs[key] = Descriptor(
                name=f"{prefix}{name}",
                help=help_text,
                label_names=tuple(label_names),
                kind=MetricKind(rest[0]) if rest else MetricKind.GAUGE,
            )
        self._descs = descs

    def __getitem__(self, key: str) -> Descriptor:
        return self._descs[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._descs)

    def __len__(self) -> int:
        return len(self._descs)

    def lookup(self, key: str) -> Optional[Descriptor]:
        return self._descs.get(key)


DEFAULT_DESCRIPTORS = [
    (KEY_QUEUE_SIZE, KEY_QUEUE_SIZE, "Size of queue", ["type"]),
    (KEY_QUEUE, KEY_QUEUE, "Current size of tx in queue", []),
    (KEY_TXS_PER_SECOND, KEY_TXS_PER_SECOND, "Number of relayed tx per second", []),
    (KEY_TXS_WAIT, KEY_TXS_WAIT, "Number of tx waiting to be relayed", []),
    (KEY_TX_COST, KEY_TX_COST, "Time(milliseconds) cost of lastest tx relay", []),
    (KEY_ADAPTORS, KEY_ADAPTORS, "Number of available adaptors", ["node"]),
    (KEY_ERRORS, KEY_ERRORS, "Count of running errors", [], MetricKind.COUNTER),
]


def default_table() -> DescriptorTable:
    """Descriptor table for the cassini metric catalog."""
    return DescriptorTable(DEFAULT_DESCRIPTORS)
