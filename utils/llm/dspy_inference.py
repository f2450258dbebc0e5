from typing import Any
import dspy
from common import global_config

from loguru import logger as log


class DSPYInference:
    def __init__(
        self,
        pred_signature: type[dspy.Signature],
        model_name: str = global_config.default_llm.default_model,
        api_key: str | None = None,
        api_base: str | None = None,
        temperature: float = global_config.default_llm.default_temperature,
        max_tokens: int = global_config.default_llm.default_max_tokens,
    ) -> None:
        # Build timeout configuration for LiteLLM (used by DSPY)
        timeout = global_config.llm_config.timeout.api_timeout_seconds

        lm_kwargs: dict[str, Any] = {}
        if api_base:
            lm_kwargs["api_base"] = api_base

        self.model_name = model_name
        self.lm = dspy.LM(
            model=model_name,
            api_key=api_key,
            cache=global_config.llm_config.cache_enabled,
            temperature=temperature,
            max_tokens=max_tokens,
            timeout=timeout,  # Add timeout to prevent hanging
            # LiteLLM retries rate-limited and transient failures itself
            num_retries=global_config.llm_config.retry.max_attempts,
            **lm_kwargs,
        )

        self.pred_signature = pred_signature
        self._inference_module = None
        self._inference_module_async = None

    def _get_inference_module(self):
        """Lazy initialization of inference module."""
        if self._inference_module is None:
            self._inference_module = dspy.Predict(self.pred_signature)
            self._inference_module_async = dspy.asyncify(self._inference_module)
        return self._inference_module, self._inference_module_async

    async def run(self, **kwargs: Any) -> Any:
        try:
            _, inference_module_async = self._get_inference_module()

            # Use dspy.context() for async-safe configuration
            with dspy.context(lm=self.lm):
                result = await inference_module_async(**kwargs, lm=self.lm)

        except Exception as e:
            log.error(f"Error in run ({self.model_name}): {str(e)}")
            raise
        return result
