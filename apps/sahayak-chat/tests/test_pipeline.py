import asyncio

import pytest

from fakes import FakeContextProvider, FakeGenerator, FakeSynthesizer, FakeTranscriber, MemorySessionStore, run
from sahayak_chat.context import CULTURE_TABLE, WEATHER_TABLE
from sahayak_chat.errors import GenerationError, SynthesisError, TranscriptionError, ValidationError
from sahayak_chat.pipeline import FALLBACK_REPLY, ChatPipeline
from sahayak_chat.profiles import LengthClass, Tone
from sahayak_chat.sessions import SessionStore


def _pipeline(**overrides):
    kwargs = dict(
        context_provider=FakeContextProvider(),
        generator=FakeGenerator(),
        session_store=MemorySessionStore(),
        transcriber=FakeTranscriber(),
        synthesizer=FakeSynthesizer(),
        context_timeout=0.5,
    )
    kwargs.update(overrides)
    return ChatPipeline(**kwargs), kwargs


def test_scenario_a_friendly_short(pipeline, generator):
    result = run(pipeline.respond("का हाल हे?", tone="friendly", length="short"))
    assert result.reply
    assert result.tone is Tone.FRIENDLY
    assert result.length is LengthClass.SHORT
    assert result.generated
    assert result.audio is None
    prompt, params = generator.calls[0]
    assert params.max_output_tokens == 100
    assert prompt.endswith("का हाल हे?")


@pytest.mark.parametrize("message", ["", "   ", "\n\t", None])
def test_scenario_b_empty_message_is_rejected_before_any_call(message):
    pipeline, deps = _pipeline()
    with pytest.raises(ValidationError):
        run(pipeline.respond(message, session_id="session-1"))
    assert deps["context_provider"].calls == []
    assert deps["generator"].calls == []
    assert deps["session_store"].messages == {}


def test_scenario_c_unknown_tone_uses_default(pipeline):
    result = run(pipeline.respond("हरेली कब मनाथें?", tone="unknown-value"))
    assert result.tone is Tone.FRIENDLY
    assert result.length is LengthClass.MEDIUM
    assert result.generated


def test_defaults_when_unspecified(pipeline, generator):
    result = run(pipeline.respond("नमस्ते"))
    assert (result.tone, result.length) == (Tone.FRIENDLY, LengthClass.MEDIUM)
    assert generator.calls[0][1].max_output_tokens == 300


def test_scenario_d_generation_failure_persists_only_user_message(tmp_path):
    async def scenario():
        store = SessionStore(str(tmp_path / "sahayak.db"))
        await store.init()
        try:
            synthesizer = FakeSynthesizer()
            pipeline = ChatPipeline(
                context_provider=FakeContextProvider(),
                generator=FakeGenerator(error=GenerationError("quota exceeded")),
                session_store=store,
                synthesizer=synthesizer,
            )
            session = await pipeline.create_session()
            result = await pipeline.respond("का हाल हे?", session_id=session.id, speak=True)
            return result, await store.recent_messages(session.id), synthesizer
        finally:
            await store.close()

    result, history, synthesizer = run(scenario())
    assert result.reply == FALLBACK_REPLY
    assert not result.generated
    assert result.audio is None
    assert synthesizer.calls == []
    assert [(m.role, m.content) for m in history] == [("user", "का हाल हे?")]


def test_unexpected_generator_exception_also_falls_back():
    pipeline, deps = _pipeline(generator=FakeGenerator(error=RuntimeError("socket closed")))
    session = run(pipeline.create_session())
    result = run(pipeline.respond("नमस्ते", session_id=session.id))
    assert result.reply == FALLBACK_REPLY
    assert [m.role for m in deps["session_store"].messages[session.id]] == ["user"]


def test_successful_exchange_persists_pair_in_order():
    pipeline, deps = _pipeline()
    session = run(pipeline.create_session(user_id="u-9"))
    result = run(pipeline.respond("पोला तिहार का हे?", tone="wise", length="long", session_id=session.id, user_id="u-9"))
    stored = deps["session_store"].messages[session.id]
    assert result.persisted
    assert [(m.role, m.content) for m in stored] == [("user", "पोला तिहार का हे?"), ("assistant", result.reply)]
    assert stored[1].tone == "wise"
    assert stored[1].response_length == "long"
    assert {m.user_id for m in stored} == {"u-9"}
    assert session.session_name == "नई बातचीत"
    assert session.language == "chhattisgarhi"


def test_no_session_means_stateless():
    pipeline, deps = _pipeline()
    result = run(pipeline.respond("नमस्ते", user_id="u-1"))
    assert result.reply
    assert not result.persisted
    assert deps["session_store"].messages == {}


def test_persistence_failure_does_not_change_reply():
    store = MemorySessionStore(fail=True)
    pipeline, _ = _pipeline(session_store=store)
    result = run(pipeline.respond("नमस्ते", session_id="session-1"))
    assert result.reply == "बने हंव, तुमन कइसे हव?"
    assert result.generated
    assert not result.persisted


def test_context_failure_still_completes_with_empty_sections():
    provider = FakeContextProvider(fail={CULTURE_TABLE, WEATHER_TABLE})
    generator = FakeGenerator()
    pipeline, _ = _pipeline(context_provider=provider, generator=generator)
    result = run(pipeline.respond("नमस्ते"))
    prompt = generator.calls[0][0]
    assert result.generated
    assert "सांस्कृतिक जानकारी:\n\n" in prompt
    assert "मौसम की जानकारी:\n\n" in prompt


def test_context_is_grounded_into_prompt():
    generator = FakeGenerator()
    pipeline, _ = _pipeline(generator=generator, culture_limit=2, weather_limit=1)
    run(pipeline.respond("नमस्ते"))
    prompt = generator.calls[0][0]
    assert "हरेली: सावन" in prompt
    assert "पंथी: सतनामी" in prompt
    assert "राउत नाचा" not in prompt
    assert "रायपुर: 32°C, साफ" in prompt
    assert "बस्तर" not in prompt


def test_voice_output_uses_tone_voice():
    pipeline, deps = _pipeline()
    result = run(pipeline.respond("नमस्ते", tone="calm", speak=True))
    assert result.audio == b"ID3-mp3-bytes"
    text, voice = deps["synthesizer"].calls[0]
    assert text == result.reply
    assert voice == Tone.CALM.voice


def test_voice_output_needs_request_flag():
    pipeline, deps = _pipeline()
    result = run(pipeline.respond("नमस्ते"))
    assert result.audio is None
    assert deps["synthesizer"].calls == []


def test_synthesis_failure_keeps_text_reply():
    pipeline, _ = _pipeline(synthesizer=FakeSynthesizer(error=SynthesisError("voice quota")))
    result = run(pipeline.respond("नमस्ते", speak=True))
    assert result.reply == "बने हंव, तुमन कइसे हव?"
    assert result.audio is None


def test_synthesis_disabled_returns_text_only():
    pipeline, _ = _pipeline(synthesizer=None)
    result = run(pipeline.respond("नमस्ते", speak=True))
    assert result.audio is None
    assert not pipeline.voice_output_enabled


def test_voice_input_round_trip():
    pipeline, deps = _pipeline()
    session = run(pipeline.create_session())
    result = run(pipeline.respond_to_audio(b"webm", tone="playful", session_id=session.id, speak=True))
    assert result.transcript == "का हाल हे?"
    assert result.tone is Tone.PLAYFUL
    assert result.audio == b"ID3-mp3-bytes"
    assert deps["transcriber"].calls == [(b"webm", "hi")]
    assert deps["session_store"].messages[session.id][0].content == "का हाल हे?"


def test_transcription_failure_is_terminal():
    pipeline, deps = _pipeline(transcriber=FakeTranscriber(error=TranscriptionError("provider down")))
    session = run(pipeline.create_session())
    with pytest.raises(TranscriptionError):
        run(pipeline.respond_to_audio(b"webm", session_id=session.id))
    assert deps["generator"].calls == []
    assert deps["session_store"].messages[session.id] == []


def test_unexpected_transcriber_error_is_wrapped():
    pipeline, _ = _pipeline(transcriber=FakeTranscriber(error=OSError("reset")))
    with pytest.raises(TranscriptionError):
        run(pipeline.respond_to_audio(b"webm"))


def test_empty_transcript_is_a_validation_error():
    pipeline, deps = _pipeline(transcriber=FakeTranscriber(text="  "))
    with pytest.raises(ValidationError):
        run(pipeline.respond_to_audio(b"webm"))
    assert deps["generator"].calls == []


def test_voice_input_disabled():
    pipeline, _ = _pipeline(transcriber=None)
    assert not pipeline.voice_input_enabled
    with pytest.raises(TranscriptionError):
        run(pipeline.respond_to_audio(b"webm"))


def test_empty_audio_is_a_validation_error():
    pipeline, deps = _pipeline()
    with pytest.raises(ValidationError):
        run(pipeline.respond_to_audio(b""))
    assert deps["transcriber"].calls == []


def test_concurrent_exchanges_do_not_share_state():
    pipeline, _ = _pipeline(context_provider=FakeContextProvider(delay=0.01))

    async def scenario():
        return await asyncio.gather(
            pipeline.respond("एक", tone="calm", length="short"),
            pipeline.respond("दू", tone="wise", length="long"),
        )

    first, second = run(scenario())
    assert (first.tone, first.length) == (Tone.CALM, LengthClass.SHORT)
    assert (second.tone, second.length) == (Tone.WISE, LengthClass.LONG)


def test_standalone_synthesize_resolves_tone():
    pipeline, deps = _pipeline()
    audio, tone = run(pipeline.synthesize("जय जोहार", "no-such-tone"))
    assert audio == b"ID3-mp3-bytes"
    assert tone is Tone.FRIENDLY
    assert deps["synthesizer"].calls[0][1] == Tone.FRIENDLY.voice


class _SlowSessionStore(MemorySessionStore):
    def __init__(self):
        super().__init__()
        self.writing = asyncio.Event()

    async def append_messages(self, session_id, records):
        self.writing.set()
        await asyncio.sleep(0.05)
        return await super().append_messages(session_id, records)


def test_cancelled_exchange_still_writes_the_whole_pair():
    store = _SlowSessionStore()
    pipeline, _ = _pipeline(session_store=store)

    async def scenario():
        session = await pipeline.create_session()
        task = asyncio.create_task(pipeline.respond("का हाल हे?", session_id=session.id))
        await store.writing.wait()
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        await asyncio.sleep(0.1)
        return session.id

    session_id = run(scenario())
    assert [m.role for m in store.messages[session_id]] == ["user", "assistant"]
