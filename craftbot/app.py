"""FastAPI control surface: inspect and steer a running agent."""

from typing import Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from craftbot.agent import Agent


class ChatIn(BaseModel):
    sender: str
    text: str


class SelfPromptIn(BaseModel):
    prompt: str


def create_app(agent: Agent) -> FastAPI:
    app = FastAPI(title=f"craftbot ({agent.name})")
    app.state.agent = agent

    @app.get("/health")
    async def health():
        return {"status": "ok", "agent": agent.name, "closed": agent.closed}

    @app.get("/status")
    async def status():
        return agent.status()

    @app.post("/message")
    async def post_message(body: ChatIn):
        """Inject a chat line as if it arrived from the environment."""
        if agent.closed:
            raise HTTPException(status_code=409, detail="Agent is shut down")
        task = await agent.on_chat(body.sender, body.text)
        return {"accepted": task is not None}

    @app.post("/mute")
    async def mute():
        await agent.mute()
        return {"muted": agent.gate.muted, "self_prompt_active": agent.self_prompter.active}

    @app.post("/self-prompt")
    async def start_self_prompt(body: SelfPromptIn):
        error: Optional[str] = agent.self_prompter.start(body.prompt)
        if error:
            raise HTTPException(status_code=400, detail=error)
        return {"active": True, "prompt": agent.self_prompter.prompt}

    @app.delete("/self-prompt")
    async def stop_self_prompt():
        was_active = agent.self_prompter.active
        await agent.self_prompter.stop(chat_notification=False)
        return {"stopped": was_active}

    return app
