"""HTTP routes for the Warlords API."""

from __future__ import annotations

from dataclasses import asdict
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, status
from pydantic import BaseModel, Field, TypeAdapter

from warlords.api.runtime import ApiState, TurnInProgressError
from warlords.domain import commands
from warlords.domain import models as dm
from warlords.domain.ai import evaluate_threat, make_decision
from warlords.domain.commands import CommandResult
from warlords.domain.enums import DevelopTarget, FailureReason
from warlords.domain.state import InvalidReferenceError
from warlords.services import TurnReport

router = APIRouter()

_STATE_ADAPTER: TypeAdapter[dm.GameState] = TypeAdapter(dm.GameState)
_EVENT_ADAPTER: TypeAdapter[dm.GameEvent] = TypeAdapter(dm.GameEvent)


def get_state(request: Request) -> ApiState:
    state = getattr(request.app.state, "api_state", None)
    if state is None:  # pragma: no cover - FastAPI should always initialise state
        raise RuntimeError("API state not initialised")
    return state


ApiStateDep = Annotated[ApiState, Depends(get_state)]


class HealthResponse(BaseModel):
    status: str
    rules_version: str


class GameSummary(BaseModel):
    id: str
    year: int
    month: int
    player_faction: str
    phase: str
    action_points: int
    faction_count: int
    city_count: int
    event_count: int


class GameDetail(GameSummary):
    state: dict[str, object]


class CreateGameRequest(BaseModel):
    player_faction: str | None = Field(default=None, min_length=1)


class ThreatSummary(BaseModel):
    city_id: str
    faction_id: str
    troops: int
    distance: int
    threat_score: float


class DevelopRequest(BaseModel):
    city_id: str
    general_id: str
    target: DevelopTarget


class RecruitRequest(BaseModel):
    city_id: str
    general_id: str


class MoveRequest(BaseModel):
    general_id: str
    to_city_id: str


class CampaignRequest(BaseModel):
    from_city_id: str
    to_city_id: str
    general_id: str


class CommandResponse(BaseModel):
    game: GameSummary
    event: dict[str, object]
    captured_city: str | None = None


class EndTurnResponse(BaseModel):
    game: GameSummary
    events: list[dict[str, object]]
    gold_income: dict[str, int]
    grain_income: dict[str, int]
    eliminated: list[str]
    skipped_actions: int


@router.get("/health", response_model=HealthResponse)
def health(api_state: ApiStateDep) -> HealthResponse:
    return HealthResponse(status="ok", rules_version=api_state.settings.rules_version)


@router.get("/rules")
def get_rules(api_state: ApiStateDep) -> dict[str, object]:
    return asdict(api_state.rules)


@router.get("/games", response_model=list[GameSummary])
def list_games(api_state: ApiStateDep) -> list[GameSummary]:
    return [_summary(state) for state in api_state.games.list_games()]


@router.post("/games", response_model=GameDetail, status_code=status.HTTP_201_CREATED)
def create_game(payload: CreateGameRequest, api_state: ApiStateDep) -> GameDetail:
    player = payload.player_faction or api_state.settings.default_player_faction
    try:
        state = api_state.games.create_game(player)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return _detail(state)


@router.get("/games/{game_id}", response_model=GameDetail)
def get_game(game_id: str, api_state: ApiStateDep) -> GameDetail:
    return _detail(_load(api_state, game_id))


@router.get("/games/{game_id}/events", response_model=list[dict[str, object]])
def list_events(game_id: str, api_state: ApiStateDep) -> list[dict[str, object]]:
    state = _load(api_state, game_id)
    return [_event_dict(event) for event in state.event_log]


@router.get("/games/{game_id}/cities/{city_id}/threats", response_model=list[ThreatSummary])
def city_threats(game_id: str, city_id: str, api_state: ApiStateDep) -> list[ThreatSummary]:
    state = _load(api_state, game_id)
    try:
        threats = evaluate_threat(state, dm.CityID(city_id), rules=api_state.rules)
    except InvalidReferenceError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return [ThreatSummary(**asdict(threat)) for threat in threats]


@router.get("/games/{game_id}/ai/{faction_id}/plan", response_model=list[dict[str, object]])
def ai_plan(game_id: str, faction_id: str, api_state: ApiStateDep) -> list[dict[str, object]]:
    state = _load(api_state, game_id)
    if faction_id not in state.factions:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail=f"Faction {faction_id} not found"
        )
    actions = make_decision(state, dm.FactionID(faction_id), rules=api_state.rules)
    return [asdict(action) for action in actions]


@router.post("/games/{game_id}/commands/develop", response_model=CommandResponse)
def command_develop(
    game_id: str, payload: DevelopRequest, api_state: ApiStateDep
) -> CommandResponse:
    result = _run(
        api_state,
        game_id,
        lambda state, rng: commands.develop(
            state,
            dm.CityID(payload.city_id),
            dm.GeneralID(payload.general_id),
            payload.target,
            rng,
            rules=api_state.rules,
        ),
    )
    return _command_response(result)


@router.post("/games/{game_id}/commands/recruit", response_model=CommandResponse)
def command_recruit(
    game_id: str, payload: RecruitRequest, api_state: ApiStateDep
) -> CommandResponse:
    result = _run(
        api_state,
        game_id,
        lambda state, _rng: commands.recruit(
            state,
            dm.CityID(payload.city_id),
            dm.GeneralID(payload.general_id),
            rules=api_state.rules,
        ),
    )
    return _command_response(result)


@router.post("/games/{game_id}/commands/move", response_model=CommandResponse)
def command_move(game_id: str, payload: MoveRequest, api_state: ApiStateDep) -> CommandResponse:
    result = _run(
        api_state,
        game_id,
        lambda state, _rng: commands.move_general(
            state,
            dm.GeneralID(payload.general_id),
            dm.CityID(payload.to_city_id),
            rules=api_state.rules,
        ),
    )
    return _command_response(result)


@router.post("/games/{game_id}/commands/campaign", response_model=CommandResponse)
def command_campaign(
    game_id: str, payload: CampaignRequest, api_state: ApiStateDep
) -> CommandResponse:
    result = _run(
        api_state,
        game_id,
        lambda state, rng: commands.launch_campaign(
            state,
            dm.CityID(payload.from_city_id),
            dm.CityID(payload.to_city_id),
            dm.GeneralID(payload.general_id),
            rng,
            rules=api_state.rules,
        ),
    )
    return _command_response(result)


@router.post("/games/{game_id}/end-turn", response_model=EndTurnResponse)
async def end_turn(game_id: str, api_state: ApiStateDep) -> EndTurnResponse:
    try:
        state, report = await api_state.end_turn(game_id)
    except FileNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail=f"Game {game_id} not found"
        ) from exc
    except TurnInProgressError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return _end_turn_response(state, report)


def _load(api_state: ApiState, game_id: str) -> dm.GameState:
    try:
        return api_state.games.get_game(game_id)
    except FileNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail=f"Game {game_id} not found"
        ) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc


def _run(api_state: ApiState, game_id: str, command) -> CommandResult:
    _load(api_state, game_id)
    try:
        result = api_state.run_command(game_id, command)
    except TurnInProgressError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    if not result.success:
        code = (
            status.HTTP_404_NOT_FOUND
            if result.error == FailureReason.INVALID_REFERENCE
            else status.HTTP_400_BAD_REQUEST
        )
        raise HTTPException(
            status_code=code, detail={"error": str(result.error), "detail": result.detail}
        )
    return result


def _summary(state: dm.GameState) -> GameSummary:
    return GameSummary(
        id=state.game_id,
        year=state.current_date.year,
        month=state.current_date.month,
        player_faction=state.current_faction,
        phase=state.phase,
        action_points=state.action_points,
        faction_count=len(state.factions),
        city_count=len(state.cities),
        event_count=len(state.event_log),
    )


def _detail(state: dm.GameState) -> GameDetail:
    summary = _summary(state)
    return GameDetail(
        **summary.model_dump(), state=_STATE_ADAPTER.dump_python(state, mode="json")
    )


def _event_dict(event: dm.GameEvent) -> dict[str, object]:
    return _EVENT_ADAPTER.dump_python(event, mode="json")


def _command_response(result: CommandResult) -> CommandResponse:
    assert result.event is not None
    return CommandResponse(
        game=_summary(result.state),
        event=_event_dict(result.event),
        captured_city=result.capture.city_id if result.capture else None,
    )


def _end_turn_response(state: dm.GameState, report: TurnReport | None) -> EndTurnResponse:
    if report is None:
        return EndTurnResponse(
            game=_summary(state),
            events=[],
            gold_income={},
            grain_income={},
            eliminated=[],
            skipped_actions=0,
        )
    return EndTurnResponse(
        game=_summary(state),
        events=[_event_dict(event) for event in report.events],
        gold_income=dict(report.gold_income),
        grain_income=dict(report.grain_income),
        eliminated=list(report.eliminated),
        skipped_actions=report.skipped_actions,
    )
