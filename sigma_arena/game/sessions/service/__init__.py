from __future__ import annotations

from .access import load_session_for_user, resolve_surviving_user_id
from .sessions_finalize import finalize_session
from .sessions_start import start_session
from .sessions_submit import submit_answer


class GameSessionService:
    start_session = staticmethod(start_session)
    submit_answer = staticmethod(submit_answer)
    finalize_session = staticmethod(finalize_session)
    load_session_for_user = staticmethod(load_session_for_user)
    resolve_surviving_user_id = staticmethod(resolve_surviving_user_id)


__all__ = ["GameSessionService"]
