from .topic_id_to_hrl import TopicIdToHrlConverter, network_code
from .string_normalization import StringNormalizationConverter

__all__ = [
    "TopicIdToHrlConverter",
    "StringNormalizationConverter",
    "network_code",
]
