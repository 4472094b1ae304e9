import pytest

from campus_nav.router.ar_assist import ARGuide, HeadingSmoother, StepMotionDetector
from campus_nav.router.nav_config import NavConfig
from campus_nav.router.navigation_engine import NavigationEngine
from campus_nav.router.route_calculator import find_route


def _feed(detector, seconds, z, hz=10, t0=0.0):
    fired = []
    for i in range(int(seconds * hz)):
        t = t0 + i / hz
        if detector.feed(0.0, 0.0, z, t):
            fired.append(t)
    return fired


# ---------------------------------------------------------------------------
# StepMotionDetector
# ---------------------------------------------------------------------------

def test_sustained_motion_fires_once():
    detector = StepMotionDetector()
    fired = _feed(detector, 8, z=1.5)
    assert len(fired) == 1
    assert fired[0] >= 3.0


def test_standing_still_never_fires():
    detector = StepMotionDetector()
    assert _feed(detector, 10, z=1.0) == []
    assert detector.signal == pytest.approx(0.0)


def test_short_bursts_do_not_fire():
    detector = StepMotionDetector()
    t = 0.0
    for _ in range(5):
        assert _feed(detector, 1.5, z=1.5, t0=t) == []
        t += 1.5
        assert _feed(detector, 2.0, z=1.0, t0=t) == []
        t += 2.0


def test_reset_rearms_detector():
    detector = StepMotionDetector()
    assert len(_feed(detector, 5, z=1.5)) == 1
    assert _feed(detector, 5, z=1.5, t0=5.0) == []
    detector.reset()
    assert len(_feed(detector, 5, z=1.5, t0=10.0)) == 1


# ---------------------------------------------------------------------------
# HeadingSmoother
# ---------------------------------------------------------------------------

def test_first_heading_becomes_anchor():
    smoother = HeadingSmoother()
    assert smoother.update(370) == pytest.approx(10)
    assert smoother.anchor == pytest.approx(10)
    assert smoother.relative_heading == pytest.approx(0)


def test_large_jumps_respond_faster_than_small_ones():
    config = NavConfig()
    small, large = HeadingSmoother(config), HeadingSmoother(config)
    small.update(0)
    large.update(0)
    small.update(10)
    large.update(120)
    small_fraction = small.heading / 10
    large_fraction = large.heading / 120
    assert large_fraction > small_fraction
    assert large.heading == pytest.approx(120 * (0.1 + (120 / 180) * 0.5))


def test_jitter_inside_deadzone_is_ignored():
    smoother = HeadingSmoother()
    smoother.update(90)
    assert smoother.update(91) == pytest.approx(90)
    assert smoother.update(89) == pytest.approx(90)


def test_smoothing_crosses_north_the_short_way():
    smoother = HeadingSmoother()
    smoother.update(350)
    heading = smoother.update(10)
    assert heading > 350 or heading < 10
    assert smoother.relative_heading > 0


def test_display_heading_rounds_to_precision():
    smoother = HeadingSmoother(NavConfig(ar_heading_precision_deg=6))
    smoother.update(0)
    smoother.update(90)          # 0.35 * 90 = 31.5
    assert smoother.heading == pytest.approx(31.5)
    assert smoother.display_heading == pytest.approx(30)


# ---------------------------------------------------------------------------
# ARGuide
# ---------------------------------------------------------------------------

@pytest.fixture
def ar(guidance, three_leg_map):
    prompts = []
    engine = NavigationEngine(guidance)
    guide = ARGuide(engine, on_confirm_prompt=prompts.append)
    route = find_route(three_leg_map, "A", "D")
    guide.start(route, three_leg_map.nodes["A"], three_leg_map.nodes["D"])
    return guide, engine, prompts


def test_motion_prompts_instead_of_advancing(ar):
    guide, engine, prompts = ar
    fired = [t for t in range(50) if guide.on_accelerometer(0, 0, 1.5, t / 10)]

    assert len(fired) == 1
    assert guide.awaiting_confirmation
    assert [s.step_number for s in prompts] == [1]
    assert engine.get_state().current_step_index == 0


def test_confirm_advances_engine(ar):
    guide, engine, prompts = ar
    for t in range(50):
        guide.on_accelerometer(0, 0, 1.5, t / 10)

    assert guide.confirm_step()
    assert not guide.awaiting_confirmation
    assert engine.get_state().current_step_index == 1
    assert engine.is_step_completed(1)

    # detector re-armed for the next step
    for t in range(50, 100):
        guide.on_accelerometer(0, 0, 1.5, t / 10)
    assert [s.step_number for s in prompts] == [1, 2]


def test_dismiss_keeps_step(ar):
    guide, engine, prompts = ar
    for t in range(50):
        guide.on_accelerometer(0, 0, 1.5, t / 10)
    guide.dismiss_prompt()
    assert not guide.awaiting_confirmation
    assert engine.get_state().current_step_index == 0


def test_arrow_rotation(ar):
    guide, engine, _ = ar
    assert guide.arrow_rotation() == 0            # north, no compass yet
    guide.on_heading(90, 0.0)
    assert guide.arrow_rotation() == pytest.approx(270)
    engine.next_step()                            # step 2 heads east
    assert guide.arrow_rotation() == pytest.approx(0)


def test_off_heading_needs_sustained_deviation(ar):
    guide, engine, _ = ar
    guide.on_heading(180, 0.0)
    assert not guide.is_off_heading
    guide.on_heading(180, 2.0)
    assert not guide.is_off_heading
    guide.on_heading(180, 3.5)
    assert guide.is_off_heading
    # display only: the engine's own direction state is untouched
    assert not engine.is_heading_wrong_direction()


def test_stop_resets_guide(ar):
    guide, engine, _ = ar
    guide.on_heading(45, 0.0)
    guide.stop()
    assert not engine.is_navigating
    assert guide.smoother.heading is None
    assert guide.arrow_rotation() is None
    assert not guide.on_accelerometer(0, 0, 1.5, 0.0)


def _sustained_motion(guide, t0, seconds=5.0, hz=10):
    return [t0 + i / hz for i in range(int(seconds * hz))
            if guide.on_accelerometer(0, 0, 1.5, t0 + i / hz)]


def test_gps_distance_does_not_advance_ar_session(ar, walker, three_leg_map):
    guide, engine, _ = ar
    assert engine.manual_steps

    engine.update_location(walker.here(0.0), three_leg_map.nodes)
    engine.update_location(walker.walk(30, 0.0), three_leg_map.nodes)
    engine.update_location(walker.walk(30, 0.0), three_leg_map.nodes)

    assert engine.get_state().current_step_index == 0
    assert engine.is_navigating


def test_prompt_is_dropped_once_its_step_is_skipped(ar):
    guide, engine, prompts = ar
    assert len(_sustained_motion(guide, 0.0)) == 1
    assert guide.prompted_step == 1

    engine.next_step()
    assert not guide.awaiting_confirmation

    assert len(_sustained_motion(guide, 5.0)) == 1
    assert [s.step_number for s in prompts] == [1, 2]
    assert guide.awaiting_confirmation

    assert guide.confirm_step()
    assert engine.get_state().current_step_index == 2


def test_confirm_for_a_step_no_longer_current_is_refused(ar):
    guide, engine, _ = ar
    _sustained_motion(guide, 0.0)
    engine.next_step()

    assert not guide.confirm_step()
    assert guide.prompted_step is None
    assert engine.get_state().current_step_index == 1
    assert not engine.is_step_completed(2)


def test_skip_step_clears_open_prompt(ar):
    guide, engine, prompts = ar
    _sustained_motion(guide, 0.0)

    assert guide.skip_step()
    assert guide.prompted_step is None
    assert engine.get_state().current_step_index == 1

    _sustained_motion(guide, 5.0)
    assert [s.step_number for s in prompts] == [1, 2]
