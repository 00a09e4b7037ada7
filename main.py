"""Simple entrypoint to print the current weather and outfit ideas locally."""

import argparse
import json

from styleme_app.app import StyleMeApp


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Print weather-aware outfit ideas.")
    parser.add_argument("--city", help="Look up this city instead of locating by IP")
    parser.add_argument("--occasion", help="Occasion such as work, party or date night")
    parser.add_argument("--wardrobe", action="store_true", help="Pick from the saved wardrobe")
    parser.add_argument("--seed", type=int, help="Seed for a repeatable wardrobe draw")
    args = parser.parse_args(argv)

    app = StyleMeApp()
    result = app.plan_outfit(city=args.city, occasion=args.occasion, use_wardrobe=args.wardrobe, seed=args.seed)
    weather = result["weather"]
    reading = weather.get("reading")
    print(
        json.dumps(
            {
                "status": result["status"],
                "weather": reading.to_dict() if reading is not None else None,
                "weather_summary": weather.get("user_facing_summary") or weather.get("message"),
                "occasion": result["occasion"],
                "suggestion": result["suggestion"].to_dict(),
                "rationale": result["user_facing_rationale"],
            },
            indent=2,
            ensure_ascii=False,
        )
    )


if __name__ == "__main__":
    main()
