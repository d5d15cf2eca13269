"""zk-next - template-driven notes with a searchable notebook index."""

__version__ = "0.3.0"
