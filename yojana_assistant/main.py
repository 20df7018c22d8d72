"""
Console Chat Interface
Interactive text loop running the same chat pipeline as the HTTP server
"""
import asyncio
import uuid
from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .agent import ChatAgent, ChatProcessingError
from .config import setup_logging
from .llm import LLMClientFactory
from .memory import InMemorySessionStore
from .schemas import ChatContext, ChatRequest, ChatResponse
from .tools import create_scheme_source_from_settings

console = Console()

EXIT_WORDS = {"exit", "quit", "bye", "बाहेर", "बंद"}

LOCALES = {
    "1": "mr-IN",
    "2": "hi-IN",
    "3": "en-IN",
}


class ConsoleChat:
    """
    Text chat loop for trying the assistant from a terminal
    """

    def __init__(self, agent: ChatAgent, locale: Optional[str] = None):
        self.agent = agent
        self.locale = locale
        self.user_id = f"console_{uuid.uuid4().hex[:8]}"

    async def send(self, text: str) -> ChatResponse:
        request = ChatRequest(
            message=text,
            context=ChatContext(
                userId=self.user_id,
                locale=self.locale,
                app="console"
            )
        )
        return await self.agent.handle(request)

    def render(self, response: ChatResponse):
        console.print(Panel(
            f"[green]{response.message}[/green]",
            title="🤖 उत्तर / Response",
            border_style="green"
        ))

        for link in response.links:
            console.print(f"🔗 [bold]{link.label}[/bold]: [blue underline]{link.url}[/blue underline]")

        if response.yojanas:
            table = Table(title="📋 योजना / Yojanas", border_style="yellow")
            table.add_column("ID", style="dim")
            table.add_column("Name")
            table.add_column("Age")
            table.add_column("Disability")
            table.add_column("Min %")
            for scheme in response.yojanas:
                table.add_row(
                    scheme.id,
                    scheme.name,
                    f"{scheme.min_age if scheme.min_age is not None else '-'}"
                    f"-{scheme.max_age if scheme.max_age is not None else '-'}",
                    scheme.applicable_disability_types or "-",
                    str(scheme.required_disability_percentage or "-")
                )
            console.print(table)

    async def run(self):
        while True:
            try:
                text = console.input("\n[bold cyan]तुम्ही / You:[/bold cyan] ").strip()
            except EOFError:
                break

            if not text:
                continue
            if text.lower() in EXIT_WORDS:
                break

            try:
                with console.status("[cyan]🤔 विचार करत आहे...[/cyan]"):
                    response = await self.send(text)
            except ChatProcessingError as e:
                console.print(f"[red]{e.apology}[/red]")
                continue

            self.render(response)


async def main_async():
    console.print(Panel(
        "[bold green]दिव्यांग पोर्टल सहाय्यक[/bold green]\n"
        "Divyang Portal Assistant\n\n"
        "[dim]Login, registration and yojana help[/dim]",
        title="🇮🇳 स्वागत / Welcome",
        border_style="green"
    ))

    console.print("\nभाषा निवडा / Select Language:")
    console.print("1. मराठी (Marathi)")
    console.print("2. हिंदी (Hindi)")
    console.print("3. English")
    choice = console.input("\nEnter choice (1-3) [default: auto]: ").strip()
    locale = LOCALES.get(choice)

    agent = ChatAgent(
        llm_client=LLMClientFactory.create_from_settings(),
        scheme_source=create_scheme_source_from_settings(),
        session_store=InMemorySessionStore.from_settings()
    )

    try:
        await ConsoleChat(agent, locale=locale).run()
    except KeyboardInterrupt:
        pass
    console.print("\n[yellow]Goodbye![/yellow]")


def main():
    """Entry point for the yojana-chat console script"""
    setup_logging("WARNING")
    asyncio.run(main_async())


if __name__ == "__main__":
    main()
