from decimal import Decimal

from pydantic import BaseModel, Field

from moneygame.models import Course, Hole, Participant, Player, TeeBox, participant_for


class HolePayload(BaseModel):
    number: int
    par: int = 4
    difficulty: int | None = None


class TeeBoxPayload(BaseModel):
    name: str
    rating: float
    slope: int = 113


class CoursePayload(BaseModel):
    name: str = "Course"
    holes: list[HolePayload] = Field(default_factory=list)
    tee_boxes: list[TeeBoxPayload] = Field(default_factory=list)

    def to_course(self) -> Course:
        return Course(
            name=self.name,
            holes=tuple(Hole(h.number, h.par, h.difficulty) for h in self.holes),
            tee_boxes=tuple(TeeBox(t.name, t.rating, t.slope) for t in self.tee_boxes),
        )


class ParticipantPayload(BaseModel):
    player_id: str
    name: str = ""
    handicap_index: float = 0.0
    course_handicap: int | None = None
    tee_box: str | None = None
    scores: dict[int, int] = Field(default_factory=dict)

    def to_participant(self, course: Course) -> Participant:
        player = Player(self.player_id, self.name or self.player_id, self.handicap_index)
        return participant_for(
            player,
            course,
            scores=self.scores,
            tee_name=self.tee_box,
            resolved_handicap=self.course_handicap,
        )


class RoundPayload(BaseModel):
    course: CoursePayload
    participants: list[ParticipantPayload] = Field(default_factory=list)

    def to_domain(self) -> tuple[Course, list[Participant]]:
        course = self.course.to_course()
        return course, [entry.to_participant(course) for entry in self.participants]

    def all_ids(self) -> list[str]:
        return [entry.player_id for entry in self.participants]


class SkinsPayload(RoundPayload):
    participant_ids: list[str] | None = None
    carryovers: bool | None = None


class PoolPayload(RoundPayload):
    pool_ids: list[str] | None = None
    entry_fee: Decimal | None = Field(default=None, ge=0)


class SavePayoutsPayload(PoolPayload):
    pin: str


class HighlightsPayload(RoundPayload):
    previous: list[ParticipantPayload] = Field(default_factory=list)


class GameEntryPayload(BaseModel):
    player_id: str
    pin: str
