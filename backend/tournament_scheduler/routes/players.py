from datetime import date
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, field_validator
from sqlmodel import Session, select

from tournament_scheduler.database import get_session
from tournament_scheduler.models.player import DayPeriod, Player
from tournament_scheduler.routes.tournaments import require_tournament

router = APIRouter()


class PlayerCreate(BaseModel):
    first_name: str
    last_name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    # Keys are calendar dates ("YYYY-MM-DD"); anything else is a 422
    availability: Dict[date, List[DayPeriod]] = {}

    @field_validator("availability")
    @classmethod
    def dedupe_periods(cls, v):
        """Keep each period once per day, in morning/daytime/evening order."""
        order = list(DayPeriod)
        return {day: sorted(set(periods), key=order.index) for day, periods in v.items()}


class PlayerResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    tournament_id: int
    first_name: str
    last_name: str
    email: Optional[str]
    phone: Optional[str]
    availability: Dict[str, List[DayPeriod]]


@router.post("/tournaments/{tournament_id}/players", response_model=PlayerResponse, status_code=201)
def create_player(tournament_id: int, payload: PlayerCreate, session: Session = Depends(get_session)):
    require_tournament(session, tournament_id)
    data = payload.model_dump()
    data["availability"] = {
        day.isoformat(): [p.value for p in periods] for day, periods in payload.availability.items()
    }
    player = Player(tournament_id=tournament_id, **data)
    session.add(player)
    session.commit()
    session.refresh(player)
    return player


@router.get("/tournaments/{tournament_id}/players", response_model=List[PlayerResponse])
def list_players(tournament_id: int, session: Session = Depends(get_session)):
    require_tournament(session, tournament_id)
    return session.exec(select(Player).where(Player.tournament_id == tournament_id).order_by(Player.id)).all()
