"""Main script for running MirrorAI from the command line."""

import asyncio
import json
import sys

from .domain.models.verification import VerificationResult
from .infrastructure.dependencies import ServiceContainer

DEMO_POSTS = [
    (
        "Cryptocurrency Facts",
        "Ethereum transitioned to proof-of-stake in September 2022. Bitcoin remains on proof-of-work.",
    ),
    (
        "Mixed Historical Claims",
        "The moon landing happened in 1969. The Earth is flat.",
    ),
]


def print_result(result: VerificationResult, asset_metadata: dict) -> None:
    """Print a verification summary."""
    print(f"\n✅ Truth Score: {result.truth_score.overall_score}/100")
    print(f"📊 Claims Found: {len(result.claims)}")
    print(f"🔗 DKG Facts Used: {result.truth_score.dkg_facts_used}")
    print(f"🔐 Hash: {result.pipeline_hash[:32]}...")
    print(f"📦 UAL: {result.dkg_asset_ual}")

    if result.truth_score.claim_scores:
        print("\n📋 Detailed Claim Scores:")
        for i, claim_score in enumerate(result.truth_score.claim_scores, 1):
            print(f"  {i}. \"{claim_score.claim.text}\"")
            print(f"     Score: {claim_score.score}/100")
            print(f"     Reasoning: {claim_score.reasoning}")

    print("\n🏷️ Asset metadata:")
    print(json.dumps(asset_metadata, indent=2))


async def run_demo(container: ServiceContainer) -> None:
    """Verify the demo posts."""
    print("🪞 MirrorAI Demo - Truth Verification System\n")
    print("=" * 60)

    pipeline = await container.get_verification_pipeline()
    for i, (title, post) in enumerate(DEMO_POSTS, 1):
        print(f"\n📝 Test Case {i}: {title}")
        print("-" * 60)
        print(f"Input: \"{post}\"\n")
        result = await pipeline.verify_post(post)
        metadata = pipeline.hash_generator.generate_asset_metadata(result.pipeline_hash, result.truth_score)
        print_result(result, metadata)

    print("\n" + "=" * 60)
    print("✅ Demo Complete!\n")


async def run_interactive(container: ServiceContainer) -> None:
    """Verify statements typed by the user."""
    print("MirrorAI - claim verification against the OriginTrail DKG")
    print("---------------------------------------------------------")

    pipeline = await container.get_verification_pipeline()
    while True:
        statement = input("\nEnter a post to verify (or 'quit' to exit): ")
        if statement.lower() in ('quit', 'exit', 'q'):
            break

        print("\nVerifying...")
        result = await pipeline.verify_post(statement)
        metadata = pipeline.hash_generator.generate_asset_metadata(result.pipeline_hash, result.truth_score)
        print_result(result, metadata)


async def run(mode: str) -> None:
    """Run the selected command-line mode."""
    container = ServiceContainer()
    try:
        if mode == "interactive":
            await run_interactive(container)
        else:
            await run_demo(container)
    finally:
        # Clean up
        await container.shutdown()


def serve() -> None:
    """Serve the HTTP API with uvicorn."""
    import uvicorn

    from .infrastructure.settings import Settings

    settings = Settings.from_env()
    print(f"🚀 MirrorAI server running on http://localhost:{settings.port}")
    uvicorn.run("mirror_ai.api.app:app", host="0.0.0.0", port=settings.port)


def main() -> None:
    """Entry point: ``serve``, ``interactive`` or the default demo."""
    mode = sys.argv[1] if len(sys.argv) > 1 else "demo"
    if mode == "serve":
        serve()
    else:
        asyncio.run(run(mode))


if __name__ == "__main__":
    main()
