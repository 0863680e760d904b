"""
FastAPI backend for Regional Factions.
Provides REST endpoints over campaign ledgers and a WebSocket feed of committed changes.
Every edit runs as one load -> apply_action -> save transaction under the campaign lock.
"""

import asyncio
import json
import logging
import secrets
import string
import uuid
from typing import Any, Literal

from fastapi import Depends, FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel
from sqlalchemy.orm import Session

from .auth import (
    campaign_members,
    check_password,
    get_current_player,
    hash_password,
    is_gm,
    is_member,
    issue_token,
    load_player,
    player_id_from_token,
    require_gm,
    require_member,
    valid_username,
)
from .broadcast import EVENT_LOG_CLEARED, broadcaster, regional_update
from .database import get_db, init_db, session_scope
from .models import Campaign, Player
from .store import (
    CampaignLedgerStore,
    campaign_lock,
    event_log_for,
    forget_campaign,
    get_campaign_row,
)

from regional_factions import __version__
from regional_factions.config import CORS_ORIGINS, DEFAULT_AUTHORITY, DEFAULT_SETUP_ID
from regional_factions.engine.actions import (
    Action,
    add_faction,
    normalize_region,
    remove_faction,
    remove_interaction,
    remove_region,
    roll_dice,
    set_interaction,
    set_region,
)
from regional_factions.engine.events import LedgerEvent
from regional_factions.engine.queries import get_faction_view, get_ledger_stats
from regional_factions.engine.reducer import apply_action
from regional_factions.engine.results import ALREADY_EXISTS, INVALID, NOT_FOUND
from regional_factions.engine.serialization import export_ledger, import_ledger
from regional_factions.engine.setups import list_setups, load_setup

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Regional Factions API",
    description="Backend API for regional faction power dynamics in tabletop campaigns",
    version=__version__,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["*"],
)


@app.middleware("http")
async def log_requests(request, call_next):
    """Log method and path so 500s can be traced to the failing endpoint."""
    method = getattr(request, "method", "?")
    url = getattr(request, "url", None)
    path = url.path if url else "?"
    try:
        response = await call_next(request)
        if response.status_code >= 500:
            logger.error("[500] %s %s", method, path)
        return response
    except Exception:
        logger.error("[500] %s %s (exception)", method, path)
        raise


@app.exception_handler(Exception)
async def unhandled_exception_handler(request, exc):
    """Return 500 with CORS headers so the frontend can read the error."""
    logger.exception("Unhandled error on %s", request.url.path)
    origin = request.headers.get("origin")
    allow_origin = origin if origin in CORS_ORIGINS else CORS_ORIGINS[0]
    return JSONResponse(
        status_code=500,
        content={"detail": str(exc)},
        headers={
            "Access-Control-Allow-Origin": allow_origin,
            "Access-Control-Allow-Credentials": "true",
        },
    )


# Alphanumeric for campaign codes (uppercase + digits)
CAMPAIGN_CODE_CHARS = string.ascii_uppercase + string.digits
CAMPAIGN_CODE_LENGTH = 4

# Event types that mean the ledger was left unchanged
SKIPPED_EVENT_TYPES = {NOT_FOUND, ALREADY_EXISTS, INVALID}

EXPORT_FILENAME = "regional-factions-data.json"


# ===== Pydantic Models =====

class RegisterRequest(BaseModel):
    email: str
    username: str
    password: str


class LoginRequest(BaseModel):
    email: str
    password: str


class CreateCampaignRequest(BaseModel):
    name: str
    """Setup id from GET /setups. Omitted = regional_factions.config.DEFAULT_SETUP_ID."""
    setup_id: str | None = None


class JoinCampaignRequest(BaseModel):
    campaign_code: str


class RegionRequest(BaseModel):
    name: str
    authority: float = DEFAULT_AUTHORITY


class FactionRequest(BaseModel):
    name: str
    leader: str | None = None
    description: str | None = None
    goals: str | None = None


class InteractionRequest(BaseModel):
    region_a: str
    faction_a: str
    region_b: str
    faction_b: str
    type: Literal["war", "alliance", "trade"]


class RemoveInteractionRequest(BaseModel):
    region_a: str
    faction_a: str
    region_b: str
    faction_b: str


class RollRequest(BaseModel):
    seed: int | None = None


class ImportRequest(BaseModel):
    data: str  # ledger document as JSON text


# ===== Helper Functions =====

def generate_campaign_code(db: Session) -> str:
    """Generate a unique 4-char alphanumeric campaign code."""
    for _ in range(20):
        code = "".join(secrets.choice(CAMPAIGN_CODE_CHARS) for _ in range(CAMPAIGN_CODE_LENGTH))
        if db.query(Campaign).filter(Campaign.campaign_code == code).first() is None:
            return code
    raise HTTPException(status_code=500, detail="Could not generate unique campaign code")


def campaign_meta(row: Campaign) -> dict[str, Any]:
    return {
        "id": str(row.id),
        "name": row.name,
        "campaign_code": row.campaign_code,
        "setup_id": row.setup_id,
        "gm_id": row.gm_id,
        "members": campaign_members(row),
        "created_at": row.created_at.isoformat() if row.created_at else None,
        "updated_at": row.updated_at.isoformat() if row.updated_at else None,
    }


def stats_for_response(ledger) -> dict[str, Any]:
    return {name: stats.to_dict() for name, stats in get_ledger_stats(ledger).items()}


def run_action(campaign_id: str, action: Action, db: Session) -> dict[str, Any]:
    """
    Apply one action as a transaction: load, apply, save, broadcast.
    Broadcasting happens under the campaign lock so observers see commits in save order.
    No-op outcomes (not_found, already_exists, invalid) are returned but neither saved nor broadcast.
    """
    with campaign_lock(campaign_id):
        store = CampaignLedgerStore(db, campaign_id)
        ledger = store.load()
        new_ledger, events = apply_action(ledger, action, event_log=event_log_for(campaign_id))
        changed = not any(e.type in SKIPPED_EVENT_TYPES for e in events)
        if changed:
            store.save(new_ledger)
            _publish(campaign_id, new_ledger, events)
    return _respond(new_ledger, events, changed)


def _publish(campaign_id: str, ledger, events: list[LedgerEvent]) -> None:
    """Fan a committed ledger out to observers. Call with the campaign lock held."""
    broadcaster.publish(campaign_id, regional_update(ledger.to_dict(), [e.to_dict() for e in events]))


def _respond(ledger, events: list[LedgerEvent], changed: bool) -> dict[str, Any]:
    return {
        "ledger": ledger.to_dict(),
        "events": [e.to_dict() for e in events],
        "changed": changed,
        "stats": stats_for_response(ledger),
    }


def _editable_campaign(campaign_id: str, player: Player, db: Session) -> Campaign:
    row = get_campaign_row(db, campaign_id)
    require_gm(row, player)
    return row


def _readable_campaign(campaign_id: str, player: Player, db: Session) -> Campaign:
    row = get_campaign_row(db, campaign_id)
    require_member(row, player)
    return row


@app.on_event("startup")
def on_startup():
    init_db()


# ===== API Endpoints =====

@app.get("/")
def root():
    return {"message": "Regional Factions API", "version": __version__}


# ----- Auth -----

@app.post("/auth/register")
def register(request: RegisterRequest, db: Session = Depends(get_db)):
    """Register with email, username (unique, no spaces/special), and password."""
    if not valid_username(request.username):
        raise HTTPException(
            status_code=400,
            detail="Username must be 2–32 characters, letters numbers and underscore only",
        )
    if db.query(Player).filter(Player.email == request.email).first():
        raise HTTPException(status_code=400, detail="Email already registered")
    if db.query(Player).filter(Player.username == request.username).first():
        raise HTTPException(status_code=400, detail="Username already taken")
    try:
        player_id = str(uuid.uuid4())
        player = Player(
            id=player_id,
            email=request.email,
            username=request.username,
            password_hash=hash_password(request.password),
        )
        db.add(player)
        db.commit()
    except Exception as e:
        db.rollback()
        raise HTTPException(status_code=500, detail=f"Registration failed: {str(e)}")
    token = issue_token(player_id)
    return {"access_token": token, "player": {"id": player_id, "email": player.email, "username": player.username}}


@app.post("/auth/login")
def login(request: LoginRequest, db: Session = Depends(get_db)):
    """Login with email and password."""
    player = db.query(Player).filter(Player.email == request.email).first()
    if not player or not check_password(request.password, player.password_hash):
        raise HTTPException(status_code=401, detail="Invalid email or password")
    token = issue_token(player.id)
    return {"access_token": token, "player": {"id": player.id, "email": player.email, "username": player.username}}


@app.get("/auth/me")
def auth_me(player: Player = Depends(get_current_player)):
    """Return current player (email, username; password not included)."""
    return {"id": player.id, "email": player.email, "username": player.username}


# ----- Campaigns (create, list, join) -----

@app.get("/setups")
def get_setups():
    """List available seed ledgers (id, display_name, description). Use setup_id in POST /campaigns."""
    return {"setups": list_setups()}


@app.post("/campaigns")
def create_campaign(
    request: CreateCampaignRequest,
    player: Player = Depends(get_current_player),
    db: Session = Depends(get_db),
):
    """Create a campaign from a setup. The creator becomes its GM."""
    setup_id = request.setup_id if request.setup_id is not None else DEFAULT_SETUP_ID
    try:
        ledger = load_setup(setup_id)
    except FileNotFoundError as e:
        raise HTTPException(status_code=400, detail=str(e))
    campaign_id = str(uuid.uuid4())
    row = Campaign(
        id=campaign_id,
        name=request.name,
        campaign_code=generate_campaign_code(db),
        gm_id=player.id,
        setup_id=setup_id,
        ledger=json.dumps(ledger.to_dict()),
        members=json.dumps([str(player.id)]),
    )
    db.add(row)
    db.commit()
    logger.info("Campaign %s created from setup %s", campaign_id, setup_id)
    return {"campaign_id": campaign_id, "campaign_code": row.campaign_code, "name": request.name}


@app.get("/campaigns")
def list_my_campaigns(
    player: Player = Depends(get_current_player),
    db: Session = Depends(get_db),
):
    """List campaigns the current player belongs to, with per-region stats."""
    mine = []
    for row in db.query(Campaign).all():
        if not is_member(row, player):
            continue
        ledger = CampaignLedgerStore(db, row.id).load()
        item = campaign_meta(row)
        item["is_gm"] = is_gm(row, player)
        item["stats"] = stats_for_response(ledger)
        mine.append(item)
    return {"campaigns": mine}


@app.post("/campaigns/join")
def join_campaign(
    request: JoinCampaignRequest,
    player: Player = Depends(get_current_player),
    db: Session = Depends(get_db),
):
    """Join a campaign by 4-char code as a read-only member."""
    code = request.campaign_code.strip().upper()
    if len(code) != CAMPAIGN_CODE_LENGTH:
        raise HTTPException(status_code=400, detail="Campaign code must be 4 characters")
    row = db.query(Campaign).filter(Campaign.campaign_code == code).first()
    if not row:
        raise HTTPException(status_code=404, detail="Campaign not found")
    members = campaign_members(row)
    if str(player.id) in members:
        return {"campaign_id": row.id, "message": "Already in campaign"}
    members.append(str(player.id))
    row.members = json.dumps(members)
    db.commit()
    return {"campaign_id": row.id, "name": row.name}


@app.get("/campaigns/{campaign_id}")
def get_campaign(
    campaign_id: str,
    player: Player = Depends(get_current_player),
    db: Session = Depends(get_db),
):
    """Campaign metadata, full ledger and per-region stats."""
    row = _readable_campaign(campaign_id, player, db)
    ledger = CampaignLedgerStore(db, campaign_id).load()
    return {
        "campaign": campaign_meta(row),
        "ledger": ledger.to_dict(),
        "stats": stats_for_response(ledger),
        "is_gm": is_gm(row, player),
    }


@app.delete("/campaigns/{campaign_id}")
def delete_campaign(
    campaign_id: str,
    player: Player = Depends(get_current_player),
    db: Session = Depends(get_db),
):
    """Delete a campaign. GM only."""
    row = _editable_campaign(campaign_id, player, db)
    with campaign_lock(campaign_id):
        db.delete(row)
        db.commit()
    forget_campaign(campaign_id)
    return {"message": f"Campaign {campaign_id} deleted"}


# ----- Regions and factions -----

@app.post("/campaigns/{campaign_id}/regions")
def do_set_region(
    campaign_id: str,
    request: RegionRequest,
    player: Player = Depends(get_current_player),
    db: Session = Depends(get_db),
):
    """Create a region or update its authority (rebalances its factions)."""
    _editable_campaign(campaign_id, player, db)
    return run_action(campaign_id, set_region(request.name, request.authority), db)


@app.delete("/campaigns/{campaign_id}/regions/{region}")
def do_remove_region(
    campaign_id: str,
    region: str,
    player: Player = Depends(get_current_player),
    db: Session = Depends(get_db),
):
    _editable_campaign(campaign_id, player, db)
    return run_action(campaign_id, remove_region(region), db)


@app.post("/campaigns/{campaign_id}/regions/{region}/factions")
def do_add_faction(
    campaign_id: str,
    region: str,
    request: FactionRequest,
    player: Player = Depends(get_current_player),
    db: Session = Depends(get_db),
):
    """Assign a faction to a region at starting power, then rebalance."""
    _editable_campaign(campaign_id, player, db)
    action = add_faction(
        region,
        request.name,
        leader=request.leader,
        description=request.description,
        goals=request.goals,
    )
    return run_action(campaign_id, action, db)


@app.get("/campaigns/{campaign_id}/regions/{region}/factions/{faction}")
def get_faction(
    campaign_id: str,
    region: str,
    faction: str,
    player: Player = Depends(get_current_player),
    db: Session = Depends(get_db),
):
    _readable_campaign(campaign_id, player, db)
    ledger = CampaignLedgerStore(db, campaign_id).load()
    view = get_faction_view(ledger, region, faction)
    if view is None:
        raise HTTPException(status_code=404, detail=f"Faction {faction} not found in {region}")
    return view


@app.delete("/campaigns/{campaign_id}/regions/{region}/factions/{faction}")
def do_remove_faction(
    campaign_id: str,
    region: str,
    faction: str,
    player: Player = Depends(get_current_player),
    db: Session = Depends(get_db),
):
    _editable_campaign(campaign_id, player, db)
    return run_action(campaign_id, remove_faction(region, faction), db)


@app.post("/campaigns/{campaign_id}/regions/{region}/normalize")
def do_normalize_region(
    campaign_id: str,
    region: str,
    player: Player = Depends(get_current_player),
    db: Session = Depends(get_db),
):
    _editable_campaign(campaign_id, player, db)
    return run_action(campaign_id, normalize_region(region), db)


# ----- Interactions -----

@app.post("/campaigns/{campaign_id}/interactions")
def do_set_interaction(
    campaign_id: str,
    request: InteractionRequest,
    player: Player = Depends(get_current_player),
    db: Session = Depends(get_db),
):
    """Set war / alliance / trade between two factions (replaces an existing type)."""
    _editable_campaign(campaign_id, player, db)
    action = set_interaction(
        request.region_a, request.faction_a, request.region_b, request.faction_b, request.type,
    )
    return run_action(campaign_id, action, db)


@app.post("/campaigns/{campaign_id}/interactions/remove")
def do_remove_interaction(
    campaign_id: str,
    request: RemoveInteractionRequest,
    player: Player = Depends(get_current_player),
    db: Session = Depends(get_db),
):
    _editable_campaign(campaign_id, player, db)
    action = remove_interaction(request.region_a, request.faction_a, request.region_b, request.faction_b)
    return run_action(campaign_id, action, db)


# ----- Simulation and event log -----

@app.post("/campaigns/{campaign_id}/roll")
def do_roll_dice(
    campaign_id: str,
    request: RollRequest | None = None,
    player: Player = Depends(get_current_player),
    db: Session = Depends(get_db),
):
    """Simulate one turn of power dynamics. Returns this turn's log entries in the turn_simulated event."""
    _editable_campaign(campaign_id, player, db)
    seed = request.seed if request is not None else None
    return run_action(campaign_id, roll_dice(seed), db)


@app.get("/campaigns/{campaign_id}/events")
def get_events(
    campaign_id: str,
    player: Player = Depends(get_current_player),
    db: Session = Depends(get_db),
):
    """All simulation log entries accumulated since the log was last cleared."""
    _readable_campaign(campaign_id, player, db)
    return {"entries": [e.to_dict() for e in event_log_for(campaign_id).all()]}


@app.delete("/campaigns/{campaign_id}/events")
def clear_events(
    campaign_id: str,
    player: Player = Depends(get_current_player),
    db: Session = Depends(get_db),
):
    _editable_campaign(campaign_id, player, db)
    with campaign_lock(campaign_id):
        event_log_for(campaign_id).clear()
        broadcaster.publish(campaign_id, {"type": EVENT_LOG_CLEARED})
    return {"entries": []}


# ----- Export / import / stats -----

@app.get("/campaigns/{campaign_id}/export")
def export_campaign(
    campaign_id: str,
    player: Player = Depends(get_current_player),
    db: Session = Depends(get_db),
):
    """Download the ledger as an indented JSON document."""
    _readable_campaign(campaign_id, player, db)
    ledger = CampaignLedgerStore(db, campaign_id).load()
    return Response(
        content=export_ledger(ledger),
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{EXPORT_FILENAME}"'},
    )


@app.post("/campaigns/{campaign_id}/import")
def import_campaign(
    campaign_id: str,
    request: ImportRequest,
    player: Player = Depends(get_current_player),
    db: Session = Depends(get_db),
):
    """Replace the ledger with an uploaded document. Malformed JSON leaves the stored ledger untouched."""
    _editable_campaign(campaign_id, player, db)
    result = import_ledger(request.data)
    if not result.ok:
        raise HTTPException(status_code=400, detail=f"Failed to import regional data: {result.error}")
    events = [LedgerEvent("ledger_imported", {})]
    with campaign_lock(campaign_id):
        CampaignLedgerStore(db, campaign_id).save(result.ledger)
        _publish(campaign_id, result.ledger, events)
    return _respond(result.ledger, events, True)


@app.get("/campaigns/{campaign_id}/stats")
def get_stats(
    campaign_id: str,
    player: Player = Depends(get_current_player),
    db: Session = Depends(get_db),
):
    _readable_campaign(campaign_id, player, db)
    ledger = CampaignLedgerStore(db, campaign_id).load()
    return {"stats": stats_for_response(ledger)}


# ----- Live updates -----

@app.websocket("/campaigns/{campaign_id}/ws")
async def campaign_updates(websocket: WebSocket, campaign_id: str, token: str | None = None):
    """
    Push every committed change of a campaign to a connected observer.
    Authenticate with ?token=<access token>; non-members are closed with code 4403.
    Client frames are read and ignored; a disconnect unsubscribes at once.
    """
    player_id = player_id_from_token(token) if token else None
    with session_scope() as db:
        row = db.query(Campaign).filter(Campaign.id == campaign_id).first()
        player = load_player(db, player_id) if player_id else None
        allowed = row is not None and player is not None and is_member(row, player)
    if not allowed:
        await websocket.close(code=4403)
        return

    await websocket.accept()
    loop = asyncio.get_running_loop()
    queue: asyncio.Queue = asyncio.Queue()
    unsubscribe = broadcaster.subscribe(
        campaign_id, lambda message: loop.call_soon_threadsafe(queue.put_nowait, message),
    )

    async def forward() -> None:
        while True:
            message = await queue.get()
            await websocket.send_json(message)

    sender = asyncio.create_task(forward())
    try:
        while True:
            frame = await websocket.receive()
            if frame["type"] == "websocket.disconnect":
                break
    except WebSocketDisconnect:
        pass
    finally:
        unsubscribe()
        sender.cancel()
