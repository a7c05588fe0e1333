import logging
from contextlib import contextmanager
from typing import Any, Dict, Optional

from . import create_client
from .clients.base import BaseClient
from .config import DEFAULT_DURATION, DEFAULT_POLL_INTERVAL, DEFAULT_ZIP_TIMEOUT
from .generator import AnimationGenerator
from .models import GenerationRequest

logger = logging.getLogger(__name__)


@contextmanager
def _client_scope(client: Optional[BaseClient], api_key: Optional[str], local: bool):
    """Yield the given client, or a new one that is closed afterwards."""
    if client is not None:
        yield client
        return
    owned = create_client(api_key=api_key, local=local)
    try:
        yield owned
    finally:
        owned.close()


def generate_animation(prompt,
                       duration=DEFAULT_DURATION,
                       block=False,
                       output_file=None,
                       input_image=None,
                       model_id=None,
                       model_name=None,
                       poll_interval=DEFAULT_POLL_INTERVAL,
                       timeout=None,
                       zip_timeout=DEFAULT_ZIP_TIMEOUT,
                       api_key=None,
                       local=False,
                       client=None) -> Dict[str, Any]:
    """
    API function to generate an animation, usable from the CLI and from code.

    Args:
        prompt: Description of the animation
        duration: Length in seconds (5 or 10)
        block: Wait for the render to finish and download the ZIP
        output_file: Where to save the ZIP when blocking
        input_image: Optional path to an input image
        model_id: Optional animation model ID (defaults to 6)
        model_name: Optional animation model name (exclusive with model_id)
        poll_interval: Seconds between status checks when blocking
        timeout: Maximum seconds to wait for the render, None for no limit
        zip_timeout: Maximum seconds to wait for the ZIP once rendered
        api_key: Optional API key (loaded from the environment if omitted)
        local: Use the local development server
        client: Optional pre-built client

    Returns:
        dict: The create response when not blocking, otherwise
        ``{"animation_id", "result_id", "zip_path"}``
    """
    request = GenerationRequest(
        prompt=prompt,
        duration=duration,
        input_image=input_image,
        model_id=model_id,
        model_name=model_name,
    )
    # Reject bad input before a client (and its API key) is needed
    request.validate()

    with _client_scope(client, api_key, local) as active_client:
        generator = AnimationGenerator(active_client, poll_interval=poll_interval, zip_timeout=zip_timeout)
        job = generator.submit(request)

        if not block:
            return job.response

        try:
            artifact = generator.await_completion(job, timeout=timeout)
        except KeyboardInterrupt:
            logger.warning(f"Stopped waiting. Animation {job.id} continues on the server.")
            raise

        path = generator.download(artifact, output_file)
        return {
            "animation_id": job.id,
            "result_id": artifact.result_id,
            "zip_path": path,
        }


def get_animation(animation_id, api_key=None, local=False, client=None):
    """Fetch the results of an animation as returned by the service."""
    with _client_scope(client, api_key, local) as active_client:
        return active_client.get_animation_results(animation_id)


def list_animations(api_key=None, local=False, client=None):
    """List all animations belonging to the current user."""
    with _client_scope(client, api_key, local) as active_client:
        return active_client.list_animations()


def regenerate_animation(animation_id, api_key=None, local=False, client=None):
    """Regenerate an animation with the same parameters; returns the new animation_id."""
    with _client_scope(client, api_key, local) as active_client:
        result = active_client.regenerate_animation(animation_id)
    if isinstance(result, dict) and "animation_id" in result:
        logger.info(f"Regeneration started (new ID: {result['animation_id']}).")
    return result
