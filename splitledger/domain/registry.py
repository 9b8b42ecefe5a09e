"""Participant registry: explicit id -> participant lookup.

Lookups of unknown ids raise UnknownParticipantError instead of returning
an empty result, so a dangling reference is never silently ignored.
"""

from collections.abc import Iterable, Iterator

from splitledger.domain.errors import UnknownParticipantError
from splitledger.domain.models import Participant, ParticipantId


class ParticipantRegistry:
    """Read-only mapping of participant ids to display metadata."""

    def __init__(self, participants: Iterable[Participant] = ()) -> None:
        self._participants: dict[ParticipantId, Participant] = {}
        for participant in participants:
            if participant.id in self._participants:
                raise ValueError(f"Participant '{participant.id}' is registered twice")
            self._participants[participant.id] = participant

    def __contains__(self, participant_id: object) -> bool:
        return participant_id in self._participants

    def __iter__(self) -> Iterator[Participant]:
        return iter(self.ordered())

    def __len__(self) -> int:
        return len(self._participants)

    def resolve(self, participant_id: ParticipantId) -> Participant:
        """Return the participant for an id.

        Raises:
            UnknownParticipantError: If the id is not registered.
        """
        try:
            return self._participants[participant_id]
        except KeyError:
            raise UnknownParticipantError(f"Unknown participant '{participant_id}'") from None

    def require(self, participant_ids: Iterable[ParticipantId]) -> None:
        """Check that every id is registered.

        Raises:
            UnknownParticipantError: For the first unknown id.
        """
        for participant_id in participant_ids:
            self.resolve(participant_id)

    def display_name(self, participant_id: ParticipantId) -> str:
        """Human-readable name, falling back to the raw id."""
        participant = self._participants.get(participant_id)
        return participant.name if participant else str(participant_id)

    def ordered(self) -> list[Participant]:
        """Participants sorted by their display order, then name."""
        return sorted(self._participants.values(), key=lambda p: (p.order, p.name, p.id))

    def ordered_ids(self) -> list[ParticipantId]:
        return [p.id for p in self.ordered()]

    def default_payer(self) -> ParticipantId | None:
        """The participant flagged as default, else the first in order."""
        ordered = self.ordered()
        for participant in ordered:
            if participant.is_default:
                return participant.id
        return ordered[0].id if ordered else None
