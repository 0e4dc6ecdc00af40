# -*- coding: utf-8 -*-
"""
Error taxonomy for the training pay engine.

Services raise these; views turn them into {"detail", "code"} responses.
Transport pipeline outcomes (GEO_FAIL, ROUTE_FAIL, NO_ADDRESS) are data states
stored on the result entries, not exceptions.
"""
from __future__ import annotations


class TrainingPayError(Exception):
    code = "error"
    status_code = 400

    def __init__(self, message: str = "", **context):
        super().__init__(message or self.default_message())
        self.context = context

    @classmethod
    def default_message(cls) -> str:
        return cls.__name__

    @property
    def detail(self) -> str:
        return str(self)


class ValidationError(TrainingPayError):
    code = "validation_error"


# ---- settlement workflow ----
class SettlementError(TrainingPayError):
    status_code = 409


class TerminalStateError(SettlementError):
    code = "terminal_state"

    @classmethod
    def default_message(cls) -> str:
        return "Process is already at its last stage."


class InitialStateError(SettlementError):
    code = "initial_state"

    @classmethod
    def default_message(cls) -> str:
        return "Process is already at its first stage."


class PrecursorNotTerminalError(SettlementError):
    code = "precursor_not_terminal"

    @classmethod
    def default_message(cls) -> str:
        return "Disbursement has not reached its final stage."


class DuplicateProcessError(SettlementError):
    code = "duplicate_process"

    @classmethod
    def default_message(cls) -> str:
        return "A process of this kind already exists for the batch."


class StaleStateError(SettlementError):
    code = "stale_state"

    @classmethod
    def default_message(cls) -> str:
        return "Process status changed concurrently; reload and try again."


# ---- geofence / commuting ----
class CommutingError(TrainingPayError):
    pass


class OutOfRangeError(CommutingError):
    code = "out_of_range"

    @classmethod
    def default_message(cls) -> str:
        return "Position is outside every active reference location."


class NoActiveLocationError(CommutingError):
    code = "no_active_location"

    @classmethod
    def default_message(cls) -> str:
        return "No active reference location is registered."


class SequenceError(CommutingError):
    code = "sequence_error"
    status_code = 409


# ---- external collaborators (raised by clients, captured by the transport pipeline) ----
class GeocodeFailure(Exception):
    pass


class RouteFailure(Exception):
    pass
