from alpine_operator.handlers import alpine, probes

__all__ = ["alpine", "probes"]
