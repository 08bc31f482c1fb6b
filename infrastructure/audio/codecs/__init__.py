from .pydub_audio_decoder import PydubAudioDecoder
from .pydub_audio_encoder import PydubAudioEncoder
from .soundfile_audio_decoder import SoundfileAudioDecoder
from .soundfile_audio_encoder import SoundfileAudioEncoder

__all__ = [
    "PydubAudioDecoder",
    "PydubAudioEncoder",
    "SoundfileAudioDecoder",
    "SoundfileAudioEncoder",
]
