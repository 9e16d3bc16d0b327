#!/usr/bin/env python3
"""
Headless Race Example

This example demonstrates how to:
1. Configure and initialize a game
2. Drive it tick by tick with scripted inputs
3. Read snapshots the way a renderer would
4. Finish the run and inspect the high-score table

Run with: python run_race.py
"""

import tempfile

from laneracer import GameConfig, GameMode, InputSample, PlayerControls, RacingGame


def main():
    print("=" * 60)
    print("LaneRacer Headless Race Example")
    print("=" * 60)

    data_dir = tempfile.mkdtemp(prefix="laneracer_")

    # Step 1: Create the game
    print("\n1. Setting up career game...")
    game = RacingGame(GameConfig(seed=42, data_dir=data_dir), mode=GameMode.CAREER)
    game.initialize()

    level = game.career.current_level
    print(f"   Level {level.level}: {level.objective}")
    print(f"   Track: {level.track.name}, Weather: {level.weather.name}")
    print(f"   Target score: {level.target_score}")

    # Step 2: Race for 30 simulated seconds at 60 Hz
    print("\n2. Racing (1800 ticks at 60Hz = 30 seconds)...")
    dt = 1 / 60

    for tick in range(1800):
        snapshot = game.render()

        # Dodge traffic close ahead, boost whenever there is charge
        lane = snapshot.player1.lane
        ahead = (snapshot.ai_lanes == lane) & (
            abs(snapshot.ai_distances - snapshot.player1.distance - 15) < 15
        )
        controls = PlayerControls(
            accelerate=True,
            left=bool(ahead.any()) and lane > 0,
            right=bool(ahead.any()) and lane == 0,
            boost=snapshot.boost_charge > 0,
        )
        game.update(dt, InputSample(player1=controls))

        if game.is_over:
            print(f"   Crashed out at tick {tick + 1}")
            break

        # Print status every 5 seconds
        if (tick + 1) % 300 == 0:
            snap = game.render()
            print(f"   t={snap.elapsed:5.1f}s: Distance = {snap.player1.distance:7.0f}, "
                  f"Speed = {snap.player1.speed:5.1f}, "
                  f"Score = {snap.player1_score:5d}, "
                  f"Health = {snap.player1.health:3d}, "
                  f"Weather = {snap.weather.name}")

    # Step 3: Final snapshot
    print("\n3. Final snapshot:")
    snap = game.render()
    print(f"   Level: {snap.level} ({snap.career_progress:.0f}% complete)")
    print(f"   Combo: {snap.combo}")
    print(f"   Boost charge: {snap.boost_charge:.0f}")
    print(f"   Traffic: {snap.ai_count} cars, {snap.obstacle_count} obstacles")

    # Step 4: Finish and persist
    print("\n4. Game over...")
    summary = game.game_over("example")
    game.cleanup()

    print(f"   Score: {summary.score}")
    print(f"   Distance: {summary.distance:.0f}")
    print(f"   Replay frames: {game.recorder.count}")
    for rank, record in enumerate(game.high_scores(), start=1):
        print(f"   #{rank} {record['player']}: {record['score']}")

    print("\n" + "=" * 60)
    print("Example complete!")
    print("=" * 60)


if __name__ == "__main__":
    main()
