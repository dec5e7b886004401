import asyncio

from deep_research.api.app import build_services
from deep_research.utils.logging import setup_logging


async def main():
    print("==========================================")
    print("  Deep Research")
    print("==========================================")

    query = input("\nEnter your research question: ")
    if not query.strip():
        print("Empty query. Exiting.")
        return

    setup_logging(level="WARNING")
    services = build_services()
    tool = services.registry.get("deep_research")

    try:
        started = await tool.execute({"action": "start", "query": query})
        if started.status == "error":
            print(f"\nERROR: {started.error}")
            return

        research_id = started.result["researchId"]
        sub_questions = started.result["subQuestions"]
        print(f"\n[1/3] Planned {len(sub_questions)} sub-questions:")
        for sq in sub_questions:
            print(f"      - {sq}")

        print("\n[2/3] Researching...")
        while True:
            step = await tool.execute({"action": "continue", "researchId": research_id})
            if step.status == "error":
                print(f"\nERROR: {step.error}")
                return
            if "subQuestionCompleted" in step.result:
                print(
                    f"      done: {step.result['subQuestionCompleted']} "
                    f"({step.result['remainingSubQuestions']} remaining)"
                )
                continue
            break

        report = await tool.execute({"action": "report", "researchId": research_id})
        print(f"\n[3/3] Completed in {report.result['duration']:.1f}s")
        print("\n" + "=" * 42)
        print(report.result["report"])
        print("=" * 42)
    finally:
        await services.search_service.close()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\nInterrupted by user.")
