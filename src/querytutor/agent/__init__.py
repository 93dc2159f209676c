"""Conversational SQL tutor driven by an LLM agent."""

from querytutor.agent.client import AgentClient, OpenAIAgentClient
from querytutor.agent.controller import TutorController, TutorReply

__all__ = [
    "AgentClient",
    "OpenAIAgentClient",
    "TutorController",
    "TutorReply",
]
