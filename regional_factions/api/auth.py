"""
Who is calling, and what they may do to a campaign.
Players sign in with a password and carry a bearer token afterwards. A campaign's GM edits
its ledger; everyone in its member list may read it.
"""

import json
import os
import re
from datetime import datetime, timedelta, timezone

import bcrypt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from .database import get_db
from .models import Campaign, Player

USERNAME_RULE = re.compile(r"^[a-zA-Z0-9_]{2,32}$")

JWT_SECRET = os.environ.get("JWT_SECRET", "change-me-in-production-use-env")
JWT_ALGORITHM = "HS256"
TOKEN_LIFETIME = timedelta(days=30)

# bcrypt only reads the first 72 bytes of a password
PASSWORD_BYTE_LIMIT = 72
BCRYPT_ROUNDS = int(os.environ.get("BCRYPT_ROUNDS", "10"))

bearer = HTTPBearer(auto_error=False)


# ===== Passwords =====

def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:PASSWORD_BYTE_LIMIT]


def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
    return bcrypt.hashpw(_password_bytes(password), salt).decode("ascii")


def check_password(password: str, stored_hash: str) -> bool:
    return bcrypt.checkpw(_password_bytes(password), stored_hash.encode("ascii"))


def valid_username(username: str) -> bool:
    return USERNAME_RULE.match(username) is not None


# ===== Tokens =====

def issue_token(player_id: str) -> str:
    claims = {"sub": player_id, "exp": datetime.now(timezone.utc) + TOKEN_LIFETIME}
    return jwt.encode(claims, JWT_SECRET, algorithm=JWT_ALGORITHM)


def player_id_from_token(token: str) -> str | None:
    """Subject of a valid token; None when it is forged, malformed or expired."""
    try:
        claims = jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
    except JWTError:
        return None
    return claims.get("sub")


def load_player(db: Session, player_id: str) -> Player | None:
    return db.query(Player).filter(Player.id == player_id).first()


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_player(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer),
    db: Session = Depends(get_db),
) -> Player:
    """FastAPI dependency resolving the bearer token to a Player, or 401."""
    if credentials is None:
        raise _unauthorized("Not authenticated")
    player_id = player_id_from_token(credentials.credentials)
    if player_id is None:
        raise _unauthorized("Invalid or expired token")
    player = load_player(db, player_id)
    if player is None:
        raise _unauthorized("Player not found")
    return player


# ===== Campaign roles =====

def campaign_members(campaign: Campaign) -> list[str]:
    try:
        members = json.loads(campaign.members) if isinstance(campaign.members, str) else campaign.members
    except (TypeError, json.JSONDecodeError):
        return []
    if not isinstance(members, list):
        return []
    return [str(m) for m in members]


def is_gm(campaign: Campaign, player: Player) -> bool:
    return campaign.gm_id is not None and str(campaign.gm_id) == str(player.id)


def is_member(campaign: Campaign, player: Player) -> bool:
    return is_gm(campaign, player) or str(player.id) in campaign_members(campaign)


def require_member(campaign: Campaign, player: Player) -> None:
    """Raise 403 unless the player belongs to the campaign."""
    if not is_member(campaign, player):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not in this campaign")


def require_gm(campaign: Campaign, player: Player) -> None:
    """Raise 403 unless the player is the campaign's GM."""
    if not is_gm(campaign, player):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only the GM can edit this campaign")
