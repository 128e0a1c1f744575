from sigma_arena.workers.tasks.daily_slots import run_daily_slots_check

__all__ = ["run_daily_slots_check"]
