"""GET /api/settings - Reward settings (read-only)"""

from fastapi import APIRouter, Depends

from cashback_tracker.api.dependencies import get_settings_repo
from cashback_tracker.api.v1.schemas import SettingsResponse
from cashback_tracker.infrastructure.storage.repositories import SettingsRepository

router = APIRouter()


@router.get("/settings", response_model=SettingsResponse)
def get_settings(settings_repo: SettingsRepository = Depends(get_settings_repo)):
    reward_settings = settings_repo.get()
    return SettingsResponse(
        cashbackRate=reward_settings.cashback_rate,
        stakingAPR=reward_settings.staking_apr,
    )
