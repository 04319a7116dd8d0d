"""Pull models on first use."""

from rag_gateway.exceptions import GatewayError, ModelProvisionError
from rag_gateway.llm.client import InferenceClient
from rag_gateway.logging_config import get_logger
from rag_gateway.observability import track_model_pull

logger = get_logger(__name__)


async def ensure_model(client: InferenceClient, model: str) -> bool:
    """Make sure `model` is available locally, pulling it if needed.

    The pull is the blocking (non-streaming) variant, so this returns only
    once the download has finished.

    Args:
        client: Inference client.
        model: Model name.

    Returns:
        True if the model had to be pulled.

    Raises:
        ModelProvisionError: If the model was missing and the pull failed.
    """
    if await client.model_exists(model):
        return False

    logger.info(f'Model "{model}" not found, pulling...')
    try:
        await client.pull_model(model)
    except GatewayError as e:
        track_model_pull(success=False)
        raise ModelProvisionError(model, e.message) from e

    track_model_pull(success=True)
    logger.info(f'Model "{model}" pulled successfully')
    return True
