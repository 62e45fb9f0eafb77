from fastapi import APIRouter, Depends, Request

from poolladder.api.deps import get_store, require_admin
from poolladder.schemas.publish import PublishIn, PublishOut
from poolladder.services.ladder import LadderStore

router = APIRouter()

@router.post("", response_model=PublishOut)
def publish(
    payload: PublishIn,
    request: Request,
    _admin=Depends(require_admin),
    store: LadderStore = Depends(get_store),
):
    publisher = request.app.state.publisher_factory()
    result = publisher.publish(store.snapshot(), payload.message)
    return PublishOut(
        sha=result.sha,
        message=result.message,
        url=result.url,
        committed_at=result.committed_at,
    )
