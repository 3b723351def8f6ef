import asyncio
import json
import logging
import uuid
from datetime import datetime
from typing import Any, Dict, List

import pytz
import uvicorn
from fastapi import FastAPI, Request, HTTPException
from fastapi.responses import JSONResponse, Response
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .engine import ReservationEngine
from .errors import ReservationError, SeatConflict
from .utils.config import get_settings
from .utils.date_utils import format_datetime

settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)
engine = ReservationEngine(settings=settings)

MCP_PROTOCOL_VERSION = "2025-03-26"
SERVER_NAME = "rail-reservations"
SERVER_VERSION = __version__

# Connected clients for session management
connected_clients: Dict[str, Dict] = {}

_DATETIME = {"type": "string", "description": "YYYY-MM-DD HH:MM:SS (local time)"}
_PASSENGER_PROPERTIES = {
    "first_name": {"type": "string", "minLength": 1},
    "last_name": {"type": ["string", "null"]},
    "date_of_birth": {"type": "string", "pattern": "^\\d{4}-\\d{2}-\\d{2}$"},
    "email": {"type": ["string", "null"]},
    "phone_number": {"type": "string", "pattern": "^[6-9][0-9]{9}$"},
}

MCP_TOOLS = [
    {
        "name": "create-passenger",
        "description": "Register a passenger. Age must be between 3 and 130 years; malformed emails are stored as empty.",
        "inputSchema": {
            "type": "object",
            "properties": {"id": {"type": "integer", "minimum": 1}, **_PASSENGER_PROPERTIES},
            "required": ["first_name", "date_of_birth", "phone_number"],
            "additionalProperties": False
        }
    },
    {
        "name": "update-passenger",
        "description": "Update passenger details. All validation rules are re-applied.",
        "inputSchema": {
            "type": "object",
            "properties": {"passenger_id": {"type": "integer"}, "fields": {
                "type": "object", "properties": _PASSENGER_PROPERTIES, "additionalProperties": False}},
            "required": ["passenger_id", "fields"],
            "additionalProperties": False
        }
    },
    {
        "name": "book-ticket",
        "description": "Book a seat on a train for a passenger. Rejected if the seat is taken for an overlapping period.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "train_name": {"type": "string"},
                "passenger_id": {"type": "integer"},
                "departure_station": {"type": "string"},
                "arrival_station": {"type": "string"},
                "departure": _DATETIME,
                "arrival": {**_DATETIME, "type": ["string", "null"]},
                "coach": {"type": "string", "maxLength": 2},
                "seat": {"type": "integer", "minimum": 1},
                "fare": {"type": ["number", "string"]}
            },
            "required": ["train_name", "passenger_id", "departure_station", "arrival_station",
                         "departure", "coach", "seat", "fare"],
            "additionalProperties": False
        }
    },
    {
        "name": "reschedule-ticket",
        "description": "Change the seat and/or travel window of a ticket.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "ticket_id": {"type": "integer"},
                "seat": {"type": "integer", "minimum": 1},
                "departure": _DATETIME,
                "arrival": {**_DATETIME, "type": ["string", "null"]}
            },
            "required": ["ticket_id"],
            "additionalProperties": False
        }
    },
    {
        "name": "cancel-ticket",
        "description": "Cancel a ticket.",
        "inputSchema": {
            "type": "object",
            "properties": {"ticket_id": {"type": "integer"}},
            "required": ["ticket_id"],
            "additionalProperties": False
        }
    },
    {
        "name": "list-active-passengers",
        "description": "Passengers with a pending journey. Phone numbers are masked.",
        "inputSchema": {"type": "object", "properties": {}, "additionalProperties": False}
    },
    {
        "name": "list-active-tickets",
        "description": "Tickets whose journey has not finished, optionally for one train or passenger. Phone numbers are masked.",
        "inputSchema": {
            "type": "object",
            "properties": {"train_name": {"type": "string"}, "passenger_id": {"type": "integer"}},
            "additionalProperties": False
        }
    },
    {
        "name": "list-train-stops",
        "description": "Stations of a train with the departure times of active tickets, in route order.",
        "inputSchema": {
            "type": "object",
            "properties": {"train_name": {"type": "string"}},
            "required": ["train_name"],
            "additionalProperties": False
        }
    },
    {
        "name": "get-current-time",
        "description": "Current date and time in the deployment's timezone.",
        "inputSchema": {
            "type": "object",
            "properties": {"timezone": {"type": "string", "default": settings.local_timezone}},
            "additionalProperties": False
        }
    }
]

app = FastAPI(
    title="Rail Reservations",
    version=SERVER_VERSION,
    description="Seat reservation integrity engine over MCP (Streamable HTTP)",
    debug=settings.debug
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"]
)


@app.get("/")
async def root():
    return {
        "name": SERVER_NAME,
        "version": SERVER_VERSION,
        "status": "running",
        "mcp_endpoint": "/mcp",
        "protocol_version": MCP_PROTOCOL_VERSION,
        "trains_loaded": len(engine.catalog.trains),
        "tools": [tool["name"] for tool in MCP_TOOLS],
        "active_sessions": len(connected_clients)
    }


@app.get("/health")
async def health():
    return {
        "status": "healthy",
        "timestamp": datetime.now().isoformat(),
        "trains": len(engine.catalog.trains),
        "tickets": len(engine.reservations),
        "active_sessions": len(connected_clients)
    }


def _rpc_error(request_id, code: int, message: str, status_code: int, data=None) -> JSONResponse:
    error = {"code": code, "message": message}
    if data is not None:
        error["data"] = data
    return JSONResponse({"jsonrpc": "2.0", "id": request_id, "error": error}, status_code=status_code)


@app.post("/mcp")
async def mcp_endpoint_post(request: Request):
    """MCP Streamable HTTP Endpoint - POST for JSON-RPC messages"""
    request_id = None
    try:
        data = await request.json()

        if not isinstance(data, dict) or data.get("jsonrpc") != "2.0":
            raise HTTPException(status_code=400, detail="Invalid JSON-RPC 2.0 message")

        method = data.get("method")
        params = data.get("params", {})
        request_id = data.get("id")

        if not method:
            raise HTTPException(status_code=400, detail="Method is required")

        logger.info(f"Received MCP request: {method} (ID: {request_id})")

        if method == "initialize":
            client_protocol_version = params.get("protocolVersion", MCP_PROTOCOL_VERSION)
            session_id = str(uuid.uuid4())
            connected_clients[session_id] = {
                "connected_at": datetime.now().isoformat(),
                "user_agent": request.headers.get("user-agent", ""),
                "client_ip": request.client.host if request.client else "unknown",
                "initialized": False,
                "protocol_version": client_protocol_version
            }
            response = {
                "jsonrpc": "2.0",
                "id": request_id,
                "result": {
                    "protocolVersion": client_protocol_version or MCP_PROTOCOL_VERSION,
                    "serverInfo": {"name": SERVER_NAME, "version": SERVER_VERSION},
                    "capabilities": {"tools": {}, "logging": {}}
                }
            }
            logger.info(f"Initialize response sent - Session: {session_id}")
            return JSONResponse(response, headers={"Mcp-Session-Id": session_id})

        # For all other methods, require session ID
        session_id = request.headers.get("mcp-session-id")
        if not session_id:
            logger.error("Missing Mcp-Session-Id header for non-initialize request")
            return _rpc_error(request_id, -32000, "Bad Request: No valid session ID provided", 400)
        if session_id not in connected_clients:
            logger.error(f"Invalid session ID: {session_id}")
            return _rpc_error(request_id, -32000, "Invalid session ID", 404)

        if method == "tools/list":
            return JSONResponse({"jsonrpc": "2.0", "id": request_id, "result": {"tools": MCP_TOOLS}})

        elif method == "tools/call":
            tool_name = params.get("name")
            arguments = params.get("arguments", {})
            if not tool_name:
                raise HTTPException(status_code=400, detail="Tool name is required")

            logger.info(f"Executing tool: {tool_name} {arguments}")
            try:
                if tool_name == "create-passenger":
                    content = await create_passenger_validated(arguments)
                elif tool_name == "update-passenger":
                    content = await update_passenger_validated(arguments)
                elif tool_name == "book-ticket":
                    content = await book_ticket_validated(arguments)
                elif tool_name == "reschedule-ticket":
                    content = await reschedule_ticket_validated(arguments)
                elif tool_name == "cancel-ticket":
                    content = await cancel_ticket_validated(arguments)
                elif tool_name == "list-active-passengers":
                    content = await list_active_passengers_validated(arguments)
                elif tool_name == "list-active-tickets":
                    content = await list_active_tickets_validated(arguments)
                elif tool_name == "list-train-stops":
                    content = await list_train_stops_validated(arguments)
                elif tool_name == "get-current-time":
                    content = await get_current_time_validated(arguments)
                else:
                    content = [{"type": "text", "text": f"Unknown tool: {tool_name}"}]
                result = {"content": content, "isError": False}
            except ReservationError as tool_error:
                logger.warning(f"Tool {tool_name} rejected: {tool_error}")
                result = {"content": _error_content(tool_error), "isError": True}
            except (KeyError, TypeError) as argument_error:
                logger.warning(f"Tool {tool_name} called with bad arguments: {argument_error!r}")
                result = {"content": _argument_error_content(tool_name, argument_error), "isError": True}

            return JSONResponse({"jsonrpc": "2.0", "id": request_id, "result": result})

        elif method.startswith("notifications/"):
            notification_type = method.replace("notifications/", "")
            logger.info(f"Received notification: {notification_type}")
            if notification_type == "initialized":
                connected_clients[session_id]["initialized"] = True
            return Response(status_code=202)

        elif method == "ping":
            return JSONResponse({
                "jsonrpc": "2.0",
                "id": request_id,
                "result": {"timestamp": datetime.now().isoformat(), "status": "alive"}
            })

        else:
            logger.warning(f"Unknown method: {method}")
            return _rpc_error(request_id, -32601, "Method not found", 404, {"method": method})

    except json.JSONDecodeError:
        logger.error("Invalid JSON in request")
        return _rpc_error(None, -32700, "Parse error", 400)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Unexpected error: {e}")
        return _rpc_error(request_id, -32603, "Internal error", 500, {"error": str(e)})


@app.delete("/mcp")
async def mcp_endpoint_delete(request: Request):
    """MCP Streamable HTTP Endpoint - DELETE for session termination"""
    session_id = request.headers.get("mcp-session-id")
    if not session_id:
        return JSONResponse({"error": "Missing Mcp-Session-Id header"}, status_code=400)
    if session_id in connected_clients:
        del connected_clients[session_id]
        logger.info(f"Session terminated: {session_id}")
        return Response(status_code=200)
    return JSONResponse({"error": "Invalid session ID"}, status_code=404)


def _text(payload: Any) -> List[Dict[str, str]]:
    return [{"type": "text", "text": json.dumps(payload, ensure_ascii=False, indent=2)}]


def _error_content(error: ReservationError) -> List[Dict[str, str]]:
    payload = {"error": type(error).__name__, "message": str(error)}
    if isinstance(error, SeatConflict):
        payload["conflicting_ticket"] = {
            "id": error.ticket_id,
            "departure": format_datetime(error.departure),
            "arrival": format_datetime(error.arrival) if error.arrival else None,
        }
    return _text(payload)


def _argument_error_content(tool_name: str, error: Exception) -> List[Dict[str, str]]:
    if isinstance(error, KeyError):
        message = f"Missing argument for {tool_name}: {error.args[0]}"
    else:
        message = f"Invalid arguments for {tool_name}: {error}"
    return _text({"error": "InvalidArguments", "message": message})


async def create_passenger_validated(args: dict) -> list:
    passenger_id = engine.create_passenger(args)
    return _text({"passenger_id": passenger_id})


async def update_passenger_validated(args: dict) -> list:
    passenger = engine.update_passenger(args["passenger_id"], args.get("fields", {}))
    return _text({"passenger_id": passenger.id, "updated": True})


async def book_ticket_validated(args: dict) -> list:
    ticket_id = engine.book_ticket(**args)
    return _text({"ticket_id": ticket_id})


async def reschedule_ticket_validated(args: dict) -> list:
    interval = None
    if "departure" in args:
        interval = (args["departure"], args.get("arrival"))
    reservation = engine.reschedule_ticket(args["ticket_id"], new_seat=args.get("seat"), new_interval=interval)
    return _text({"ticket_id": reservation.id, "seat": reservation.seat,
                  "departure": format_datetime(reservation.departure),
                  "arrival": format_datetime(reservation.arrival) if reservation.arrival else None})


async def cancel_ticket_validated(args: dict) -> list:
    engine.cancel_ticket(args["ticket_id"])
    return _text({"ticket_id": args["ticket_id"], "cancelled": True})


async def list_active_passengers_validated(args: dict) -> list:
    return _text([p.model_dump(mode="json") for p in engine.list_active_passengers()])


async def list_active_tickets_validated(args: dict) -> list:
    tickets = engine.list_active_tickets(train_name=args.get("train_name"), passenger_id=args.get("passenger_id"))
    return _text([t.model_dump(mode="json") for t in tickets])


async def list_train_stops_validated(args: dict) -> list:
    stops = engine.list_train_stops(args["train_name"])
    return _text([s.model_dump(mode="json") for s in stops])


async def get_current_time_validated(args: dict) -> list:
    timezone_str = args.get("timezone", settings.local_timezone)
    try:
        tz = pytz.timezone(timezone_str)
    except pytz.exceptions.UnknownTimeZoneError:
        tz = pytz.timezone(settings.local_timezone)
    now = engine.clock.utcnow().astimezone(tz)
    return [{"type": "text", "text": now.strftime("%Y-%m-%d %H:%M:%S") + f" {tz.zone}"}]


@app.on_event("startup")
async def startup_event():
    logger.info(f"Loading catalog from {settings.catalog_path}")
    if not engine.catalog.trains:
        await engine.catalog.load_catalog(settings.catalog_path)


async def main_server():
    logger.info(f"MCP endpoint: http://{settings.server_host}:{settings.server_port}/mcp")
    config = uvicorn.Config(
        app,
        host=settings.server_host,
        port=settings.server_port,
        log_level=settings.log_level.lower()
    )
    uvicorn_server = uvicorn.Server(config)
    await uvicorn_server.serve()


def main():
    asyncio.run(main_server())


if __name__ == "__main__":
    main()
