"""
Custom exception hierarchy for the Banco engine and server.

Every error carries a stable ``code`` so the transport layer can report
it to the offending client without parsing messages. Raising any of these
from an engine action guarantees that no state was mutated.
"""

from typing import Optional


class GameError(Exception):
    """Base exception for all game-related errors."""

    code = "GameError"
    default_message = "Game error"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


class InvalidActionError(GameError):
    """Action is not legal in the current state."""

    code = "InvalidAction"
    default_message = "Action is not allowed right now."


class NotActiveError(InvalidActionError):
    code = "NotActive"
    default_message = "Game is not active."


class NotYourTurnError(InvalidActionError):
    code = "NotYourTurn"
    default_message = "It is not your turn."


class AlreadyRolledError(InvalidActionError):
    code = "AlreadyRolled"
    default_message = "Dice were already rolled this turn."


class MustRollFirstError(InvalidActionError):
    code = "MustRollFirst"
    default_message = "Roll the dice before ending the turn."


class PendingDecisionError(InvalidActionError):
    """A purchase or upgrade decision is outstanding."""

    code = "PendingDecision"
    default_message = "Resolve the pending decision first."


class PendingPurchaseError(PendingDecisionError):
    code = "PendingPurchase"
    default_message = "Decide whether to buy or pass the property first."


class NoPendingPurchaseError(InvalidActionError):
    code = "NoPendingPurchase"
    default_message = "No purchase is pending for this property."


class NothingToPassError(InvalidActionError):
    code = "NothingToPass"
    default_message = "There is no purchase to pass."


class NoPendingUpgradeError(InvalidActionError):
    code = "NoPendingUpgrade"
    default_message = "Upgrades are only offered when visiting this property this turn."


class NotOwnerError(InvalidActionError):
    code = "NotOwner"
    default_message = "You do not own this property."


class MaxLevelReachedError(InvalidActionError):
    code = "MaxLevelReached"
    default_message = "Property is already at the maximum level."


class AlreadyOwnedError(InvalidActionError):
    code = "AlreadyOwned"
    default_message = "Property already has an owner."


class NotInJailError(InvalidActionError):
    code = "NotInJail"
    default_message = "You are not in jail."


class AlreadyStartedError(InvalidActionError):
    code = "AlreadyStarted"
    default_message = "Game has already started."


class NotEnoughPlayersError(InvalidActionError):
    code = "NotEnoughPlayers"
    default_message = "At least 2 players are needed to start."


class NoActivePlayersError(InvalidActionError):
    code = "NoActivePlayers"
    default_message = "There are no active players."


class InsufficientFundsError(GameError):
    code = "InsufficientFunds"
    default_message = "Not enough money."


class RoomFullError(GameError):
    code = "RoomFull"
    default_message = "Room is full."


class InvalidTargetError(GameError):
    """Unknown player, property or room id."""

    code = "InvalidTarget"
    default_message = "Unknown target."


class RoomNotFoundError(InvalidTargetError):
    default_message = "Room not found."


class UnauthorizedError(GameError):
    """A non-host player attempted a host-only action."""

    code = "Unauthorized"
    default_message = "Only the host can do that."


class ValidationError(GameError):
    """Input validation failed."""

    code = "ValidationError"
    default_message = "Malformed message."
