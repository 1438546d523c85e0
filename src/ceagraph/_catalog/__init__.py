"""Built-in cost-effectiveness models.

Key functions:
- list_models: All built-in models, default first
- get_model: Look up a built-in model by id
"""

import logging

from ceagraph._model import CEAModel

from . import _amf_itn, _new_incentives, _smc, _taimaka

logger = logging.getLogger(__name__)

DEFAULT_MODEL_ID = _amf_itn.MODEL.id

_MODELS: dict[str, CEAModel] = {
    model.id: model for model in (_amf_itn.MODEL, _new_incentives.MODEL, _taimaka.MODEL, _smc.MODEL)
}


def list_models() -> list[CEAModel]:
    """Return the built-in models, the default model first."""
    return list(_MODELS.values())


def get_model(model_id: str) -> CEAModel:
    """Return the built-in model with the given id.

    Unknown ids fall back to the default model.
    """
    try:
        return _MODELS[model_id]
    except KeyError:
        logger.warning("Unknown model '%s', using '%s'", model_id, DEFAULT_MODEL_ID)
        return _MODELS[DEFAULT_MODEL_ID]


def has_model(model_id: str) -> bool:
    return model_id in _MODELS


__all__ = [
    "DEFAULT_MODEL_ID",
    "get_model",
    "has_model",
    "list_models",
]
