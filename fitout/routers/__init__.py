from fitout.routers.intent import router as intent_router
from fitout.routers.locations import router as locations_router
from fitout.routers.patterns import router as patterns_router
from fitout.routers.trades import router as trades_router
