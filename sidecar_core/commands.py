"""
Command Table — Named operations exposed to the front-end.

Each command receives the shared :class:`AppState` plus named arguments
decoded from a JSON object. :func:`invoke` returns a JSON document:

    {"ok": true, "result": <value>}
    {"ok": false, "error": {"kind": "...", "message": "..."}}

Transport (how the payload reaches this process) is not handled here.
"""
import inspect
import logging
from typing import Any, Callable, Optional, Union, get_type_hints

import orjson
from pydantic import NonNegativeInt, TypeAdapter, ValidationError

from . import utils
from .exceptions import NotFoundError, SerializationError, SidecarError
from .state import AppState

logger = logging.getLogger("sidecar.commands")

Handler = Callable[..., Any]

COMMANDS: dict[str, Handler] = {}

# Per-command validators for the JSON arguments, keyed by parameter name.
_VALIDATORS: dict[str, dict[str, TypeAdapter]] = {}


def command(name: str) -> Callable[[Handler], Handler]:
    """Register ``fn`` under ``name`` in :data:`COMMANDS`.

    Every parameter after ``state`` gets a strict validator built from
    its annotation, so a JSON value of the wrong type never reaches
    the handler.
    """
    def decorator(fn: Handler) -> Handler:
        hints = get_type_hints(fn, include_extras=True)
        params = list(inspect.signature(fn).parameters)[1:]
        COMMANDS[name] = fn
        _VALIDATORS[name] = {
            param: TypeAdapter(hints[param]) for param in params
        }
        return fn
    return decorator


# --- Database ---

@command("db_init")
def db_init(state: AppState, path: Optional[str] = None) -> None:
    state.db_init(path)


@command("db_execute")
def db_execute(state: AppState, sql: str, params: Optional[list] = None) -> int:
    return state.db_execute(sql, params)


@command("db_query")
def db_query(state: AppState, sql: str, params: Optional[list] = None) -> list:
    return state.db_query(sql, params)


# --- Encryption ---

@command("init_encryption")
def init_encryption(state: AppState, password: str) -> None:
    state.init_encryption(password)


@command("encrypt_data")
def encrypt_data(state: AppState, plaintext: str) -> str:
    return state.encrypt_data(plaintext)


@command("decrypt_data")
def decrypt_data(state: AppState, ciphertext: str) -> str:
    return state.decrypt_data(ciphertext)


# --- Credentials ---

@command("store_credentials")
def store_credentials(state: AppState, provider: str, credentials: str) -> None:
    state.store_credentials(provider, credentials)


@command("get_credentials")
def get_credentials(state: AppState, provider: str) -> Optional[str]:
    return state.get_credentials(provider)


@command("delete_credentials")
def delete_credentials(state: AppState, provider: str) -> None:
    state.delete_credentials(provider)


# --- OAuth ---

@command("store_oauth_state")
def store_oauth_state(state: AppState, provider: str, oauth_state: str) -> None:
    state.store_oauth_state(provider, oauth_state)


@command("validate_oauth_state")
def validate_oauth_state(state: AppState, provider: str, oauth_state: str) -> bool:
    return state.validate_oauth_state(provider, oauth_state)


# --- Utilities ---

@command("generate_random_string")
def generate_random_string(state: AppState, length: NonNegativeInt) -> str:
    try:
        return utils.generate_random_string(length)
    except ValueError as err:
        raise SerializationError(err) from err


@command("generate_secure_id")
def generate_secure_id(state: AppState) -> str:
    return utils.generate_secure_id()


@command("open_browser")
def open_browser(state: AppState, url: str) -> None:
    utils.open_browser(url)


@command("get_app_data_dir")
def get_app_data_dir(state: AppState) -> str:
    return utils.get_app_data_dir(state.config.data_dir)


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------

def _decode_args(payload: Union[str, bytes, None]) -> dict:
    if payload is None or payload in ("", b""):
        return {}
    try:
        args = orjson.loads(payload)
    except orjson.JSONDecodeError as err:
        raise SerializationError(err) from err
    if not isinstance(args, dict):
        raise SerializationError(
            f"Command arguments must be a JSON object, got {type(args).__name__}"
        )
    return args


def dispatch(state: AppState, name: str, args: dict) -> Any:
    """Run command ``name`` with already-decoded arguments.

    Raises:
        NotFoundError: If no command is registered under ``name``.
        SerializationError: If the arguments do not fit the command.
    """
    try:
        handler = COMMANDS[name]
    except KeyError:
        raise NotFoundError(f"Unknown command: {name}") from None
    try:
        bound = inspect.signature(handler).bind(state, **args)
    except TypeError as err:
        raise SerializationError(f"{name}: {err}") from err
    validators = _VALIDATORS[name]
    for param, value in list(bound.arguments.items())[1:]:
        try:
            bound.arguments[param] = validators[param].validate_python(
                value, strict=True
            )
        except ValidationError as err:
            raise SerializationError(
                f"{name}: invalid value for '{param}': {err.errors()[0]['msg']}"
            ) from err
    return handler(*bound.args, **bound.kwargs)


def invoke(state: AppState, name: str, payload: Union[str, bytes, None] = None) -> bytes:
    """Decode ``payload``, run the command and encode its outcome.

    Tagged sidecar errors are reported in the response body; anything
    else propagates.
    """
    try:
        result = dispatch(state, name, _decode_args(payload))
    except SidecarError as err:
        logger.debug("Command %s failed: %s", name, err)
        return orjson.dumps({"ok": False, "error": err.as_dict()})
    return orjson.dumps({"ok": True, "result": result})
