import pytest

from moneygame.models import Course, Hole, Participant, Player

PARS = [4, 4, 3, 5, 4, 4, 3, 5, 4, 4, 4, 3, 5, 4, 4, 3, 5, 4]
# Odd ranks on the front nine, even ranks on the back.
DIFFICULTIES = [7, 1, 15, 3, 11, 5, 17, 9, 13, 8, 2, 16, 4, 12, 6, 18, 10, 14]


def make_participant(player_id: str, course_handicap: int = 0, scores: dict | None = None, name: str | None = None) -> Participant:
    return Participant(
        player=Player(player_id, name or player_id.upper()),
        course_handicap=course_handicap,
        scores=dict(scores or {}),
    )


def flat_scores(value: int, holes=range(1, 19), **overrides: int) -> dict[int, int]:
    scores = {number: value for number in holes}
    for key, gross in overrides.items():
        scores[int(key.lstrip("h"))] = gross
    return scores


@pytest.fixture
def course() -> Course:
    holes = tuple(
        Hole(number, par, difficulty)
        for number, (par, difficulty) in enumerate(zip(PARS, DIFFICULTIES), start=1)
    )
    return Course(name="Pinecrest", holes=holes)


@pytest.fixture
def simple_course() -> Course:
    return Course(name="Simple", holes=tuple(Hole(number, 4, number) for number in range(1, 19)))


@pytest.fixture
def three_hole_course() -> Course:
    return Course(name="Short", holes=(Hole(1, 4, 2), Hole(2, 4, 1), Hole(3, 4, 3)))
