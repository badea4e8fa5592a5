"""Building blocks for a DAG-based consensus node: range maps, cached serialized data,
block signing, time helpers, metrics, a monitored lock, a discrete-event simulator and
wire framing."""

__version__ = "0.1.0"