import pytest

from fakes import FakeContextProvider, FakeGenerator, FakeSynthesizer, FakeTranscriber, MemorySessionStore
from sahayak_chat.pipeline import ChatPipeline


@pytest.fixture()
def context_provider():
    return FakeContextProvider()


@pytest.fixture()
def generator():
    return FakeGenerator()


@pytest.fixture()
def transcriber():
    return FakeTranscriber()


@pytest.fixture()
def synthesizer():
    return FakeSynthesizer()


@pytest.fixture()
def session_store():
    return MemorySessionStore()


@pytest.fixture()
def pipeline(context_provider, generator, session_store, transcriber, synthesizer):
    return ChatPipeline(
        context_provider=context_provider,
        generator=generator,
        session_store=session_store,
        transcriber=transcriber,
        synthesizer=synthesizer,
        context_timeout=0.5,
    )
