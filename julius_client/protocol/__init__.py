"""Julius module-mode wire protocol: framing, decoding and event types."""
