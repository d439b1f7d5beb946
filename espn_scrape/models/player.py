from datetime import datetime, timezone
from typing import Optional
from sqlalchemy import String, Integer, Boolean, DateTime, ForeignKey, JSON, UniqueConstraint, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from espn_scrape.database import Base


class Player(Base):
    """Durable player identity. Rows are created out-of-band, never by the jobs."""

    __tablename__ = "players"
    __table_args__ = (
        Index("ix_players_name", "last_name", "first_name"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    team_id: Mapped[Optional[int]] = mapped_column(ForeignKey("teams.id"), index=True)
    position: Mapped[Optional[str]] = mapped_column(String(10))
    espn_player_id: Mapped[Optional[str]] = mapped_column(String(20), unique=True, index=True)
    active: Mapped[bool] = mapped_column(Boolean, default=True)

    # Headshot metadata
    headshot_url: Mapped[Optional[str]] = mapped_column(String(500))
    headshot_alt: Mapped[Optional[str]] = mapped_column(String(200))
    headshot_width: Mapped[Optional[int]] = mapped_column(Integer)
    headshot_height: Mapped[Optional[int]] = mapped_column(Integer)
    headshot_updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime)
    storage_path: Mapped[Optional[str]] = mapped_column(String(500))
    headshot_sizes: Mapped[Optional[dict]] = mapped_column(JSON)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    team: Mapped[Optional["Team"]] = relationship("Team", back_populates="players")
    stats: Mapped[list["PlayerStat"]] = relationship("PlayerStat", back_populates="player")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class PlayerStat(Base):
    """One row per player per game. Passing/rushing/receiving are JSON blobs."""

    __tablename__ = "player_stats"
    __table_args__ = (
        UniqueConstraint("player_code", "game_date", name="uq_player_stats_code_date"),
        UniqueConstraint("espn_player_id", "espn_game_id", name="uq_player_stats_espn_game"),
        Index("ix_player_stats_season_week", "season", "week"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    player_code: Mapped[str] = mapped_column(String(40), nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    team: Mapped[Optional[str]] = mapped_column(String(100))
    game_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    game_location: Mapped[str] = mapped_column(String(100), default="")

    passing: Mapped[Optional[dict]] = mapped_column(JSON)
    rushing: Mapped[Optional[dict]] = mapped_column(JSON)
    receiving: Mapped[Optional[dict]] = mapped_column(JSON)
    fumbles: Mapped[int] = mapped_column(Integer, default=0)
    fumbles_lost: Mapped[int] = mapped_column(Integer, default=0)

    player_id: Mapped[Optional[int]] = mapped_column(ForeignKey("players.id"), index=True)
    espn_player_id: Mapped[str] = mapped_column(String(20), nullable=False)
    espn_game_id: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    season: Mapped[Optional[int]] = mapped_column(Integer)
    week: Mapped[Optional[int]] = mapped_column(Integer)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=lambda: datetime.now(timezone.utc))

    player: Mapped[Optional["Player"]] = relationship("Player", back_populates="stats")
