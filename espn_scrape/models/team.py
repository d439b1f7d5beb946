from datetime import datetime, timezone
from typing import Optional
from sqlalchemy import String, Integer, Float, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from espn_scrape.database import Base


class Team(Base):
    __tablename__ = "teams"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    abbreviation: Mapped[str] = mapped_column(String(5), unique=True, nullable=False)
    full_name: Mapped[str] = mapped_column(String(100), nullable=False)
    espn_team_id: Mapped[Optional[str]] = mapped_column(String(10), unique=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    players: Mapped[list["Player"]] = relationship("Player", back_populates="team")


class Schedule(Base):
    __tablename__ = "schedules"

    id: Mapped[int] = mapped_column(primary_key=True)
    espn_game_id: Mapped[str] = mapped_column(String(20), unique=True, nullable=False, index=True)
    home_team_id: Mapped[Optional[int]] = mapped_column(ForeignKey("teams.id"))
    away_team_id: Mapped[Optional[int]] = mapped_column(ForeignKey("teams.id"))
    game_time: Mapped[Optional[datetime]] = mapped_column(DateTime)
    week: Mapped[Optional[int]] = mapped_column(Integer)
    year: Mapped[Optional[int]] = mapped_column(Integer)
    season_type: Mapped[Optional[int]] = mapped_column(Integer)

    # Betting fields, derived from the odds feed when available
    betting_line: Mapped[Optional[float]] = mapped_column(Float)
    over_under: Mapped[Optional[float]] = mapped_column(Float)
    home_implied_points: Mapped[Optional[float]] = mapped_column(Float)
    away_implied_points: Mapped[Optional[float]] = mapped_column(Float)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
