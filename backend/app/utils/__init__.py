from .inflight import InFlightRegistry

__all__ = ["InFlightRegistry"]
