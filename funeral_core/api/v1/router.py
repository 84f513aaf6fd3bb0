from fastapi import APIRouter

from funeral_core.api.routers import cases, contracts, notes, policies

api_router = APIRouter()

api_router.include_router(cases.router)
api_router.include_router(contracts.router)
api_router.include_router(notes.router)
api_router.include_router(policies.contact_management_router)
api_router.include_router(policies.payment_management_router)
api_router.include_router(policies.presets_router)
