import asyncio
import code
import sys

from dotenv import load_dotenv

from billing_client import create_billing_client
from config import settings
from repositories.doctors_repository import doctors_repository
from repositories.orders_repository import orders_repository
from repositories.unbilled_repository import unbilled_repository
from schemas import Notice
from services.unbilled_screen import UnbilledScreen


def ask(question: str) -> bool:
    answer = input(f"{question} [y/N] ")
    return answer.strip().lower() in {"y", "yes"}


def show_notice(notice: Notice) -> None:
    stream = sys.stdout if notice.level == "success" else sys.stderr
    print(f"[{notice.level}] {notice.message}", file=stream)


def show_navigation(path: str) -> None:
    print(f"-> open {path}")


def main() -> None:
    load_dotenv()
    if not settings.billing_api_token:
        raise SystemExit("Set BILLING_API_TOKEN to open the unbilled shell.")
    client = create_billing_client()
    screen = UnbilledScreen(
        unbilled_repository(client),
        orders_repository(client),
        doctors_repository(client),
        confirm=ask,
        notify=show_notice,
        navigate=show_navigation,
    )
    asyncio.run(screen.load())

    banner = (
        "Unbilled orders shell\n"
        f"{len(screen.orders)} unbilled orders loaded.\n"
        "Variables 'screen' and 'run' are available. Example:\n"
        ">>> screen.set_search('jane'); [o.serialNo for o in screen.filtered]\n"
        ">>> run(screen.submit_edit(order_id, {**screen.view(order_id).raw, 'paymentMode': 'Cash'}))\n"
    )
    namespace = {"screen": screen, "run": asyncio.run}
    try:
        code.interact(banner=banner, local=namespace)
    finally:
        client.close()


if __name__ == "__main__":
    main()
