from fitout.services.intent import resolve_intent, prefill_project, describe_action
from fitout.services.pattern_store import PatternSet, PatternStore, pattern_store, load
from fitout.services.seed import seed_trades
