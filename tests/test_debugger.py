#!/usr/bin/env python3
"""
Debugger controller: single-step, throttled running, pause, speed and quit.
"""

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', 'src'))

from bfstep.assembler import parse
from bfstep.config import DebuggerConfig
from bfstep.debugger import Debugger, KeyEvent, KeySource, Mode
from bfstep.engine import BytesInput, Interpreter


class ScriptedKeys(KeySource):
    """Replays key events; `poll` yields None `idle` times before each event."""

    def __init__(self, events, idle=0):
        self.events = list(events)
        self.idle = idle
        self._waited = 0

    def wait(self):
        return self.events.pop(0) if self.events else KeyEvent.QUIT

    def poll(self):
        if not self.events:
            return None
        if self._waited < self.idle:
            self._waited += 1
            return None
        self._waited = 0
        return self.events.pop(0)


class Recorder:
    def __init__(self):
        self.pcs = []

    def __call__(self, frame):
        self.pcs.append(frame.pc)


def _debugger(source, events=(), idle=0, throttle=1, input=b""):
    interp = Interpreter(parse(source), BytesInput(input))
    rec = Recorder()
    dbg = Debugger(interp, ScriptedKeys(events, idle), rec, DebuggerConfig(throttle=throttle))
    return dbg, interp, rec


def test_starts_paused():
    dbg, interp, rec = _debugger("+++")
    assert dbg.state.mode is Mode.PAUSED
    assert interp.steps == 0
    assert rec.pcs == []


def test_manual_steps_advance_one_each():
    dbg, interp, rec = _debugger("++++++++")
    for _ in range(5):
        dbg.handle(KeyEvent.STEP)
    assert interp.state.pc == 5
    assert rec.pcs == [1, 2, 3, 4, 5]
    assert dbg.state.mode is Mode.PAUSED


def test_any_non_control_key_steps_while_paused():
    dbg, interp, rec = _debugger("++++")
    for event in (KeyEvent.SPEED_UP, KeyEvent.SPEED_DOWN, KeyEvent.PAUSE):
        dbg.handle(event)
    assert interp.state.pc == 3
    assert len(rec.pcs) == 3
    assert dbg.state.throttle == 1


def test_manual_steps_halt_early():
    dbg, interp, rec = _debugger("++")
    for _ in range(5):
        dbg.handle(KeyEvent.STEP)
    assert interp.halted
    assert interp.steps == 2
    assert dbg.state.mode is Mode.TERMINATED
    # one redraw per executed step; the last one shows the halted state
    assert rec.pcs == [1, 2]


def test_continue_then_throttled_redraws():
    dbg, interp, rec = _debugger("+" * 10, throttle=3)
    dbg.handle(KeyEvent.CONTINUE)
    assert dbg.state.mode is Mode.RUNNING
    assert interp.steps == 0
    while not dbg.terminated:
        dbg.tick()
    assert interp.steps == 10
    # every 3rd step plus the final redraw on halt
    assert rec.pcs == [3, 6, 9, 10]


def test_throttle_of_one_redraws_every_step():
    dbg, interp, rec = _debugger("+" * 4)
    dbg.handle(KeyEvent.CONTINUE)
    while not dbg.terminated:
        dbg.tick()
    assert rec.pcs == [1, 2, 3, 4]


def test_pause_while_running():
    dbg, interp, rec = _debugger("+" * 20, throttle=4)
    dbg.handle(KeyEvent.CONTINUE)
    for _ in range(6):
        dbg.tick()
    dbg.handle(KeyEvent.PAUSE)
    assert dbg.state.mode is Mode.PAUSED
    assert rec.pcs == [4, 6]
    # ticks do nothing once paused
    dbg.tick()
    assert interp.steps == 6


def test_speed_keys_adjust_throttle_only_while_running():
    dbg, interp, rec = _debugger("+" * 20, throttle=2)
    dbg.handle(KeyEvent.CONTINUE)
    dbg.handle(KeyEvent.SPEED_UP)
    assert dbg.state.throttle == 4
    dbg.handle(KeyEvent.SPEED_DOWN)
    dbg.handle(KeyEvent.SPEED_DOWN)
    dbg.handle(KeyEvent.SPEED_DOWN)
    assert dbg.state.throttle == 1
    assert interp.steps == 0
    assert rec.pcs == []


def test_quit_while_paused():
    dbg, interp, rec = _debugger("+++")
    dbg.handle(KeyEvent.STEP)
    dbg.handle(KeyEvent.QUIT)
    assert dbg.terminated
    assert dbg.state.quit_requested
    dbg.handle(KeyEvent.STEP)
    assert interp.steps == 1


def test_quit_while_running_stops_immediately():
    dbg, interp, rec = _debugger("+[]")
    dbg.handle(KeyEvent.CONTINUE)
    for _ in range(50):
        dbg.tick()
    dbg.handle(KeyEvent.QUIT)
    dbg.tick()
    assert dbg.terminated
    assert interp.steps == 50


def test_run_loop_with_scripted_keys():
    # initial frame, two manual steps, then continue until halt
    events = [KeyEvent.STEP, KeyEvent.STEP, KeyEvent.CONTINUE]
    dbg, interp, rec = _debugger("+++++", events=events, throttle=100)
    state = dbg.run()
    assert state.mode is Mode.TERMINATED
    assert not state.quit_requested
    assert interp.halted
    assert rec.pcs == [0, 1, 2, 5]


def test_run_loop_quit_while_running():
    # poll returns nothing 10 times, then quit arrives
    events = [KeyEvent.CONTINUE, KeyEvent.QUIT]
    dbg, interp, rec = _debugger("+[]", events=events, idle=10)
    state = dbg.run()
    assert state.quit_requested
    assert interp.steps == 10
    assert not interp.halted


def test_input_during_stepping():
    dbg, interp, rec = _debugger(",.", input=b"Z")
    dbg.handle(KeyEvent.STEP)
    assert interp.state.tape[0] == ord("Z")
    dbg.handle(KeyEvent.STEP)
    assert bytes(interp.output) == b"Z"
    assert dbg.terminated


def test_kept_frames_do_not_change():
    interp = Interpreter(parse("+>+>+"))
    frames = []
    dbg = Debugger(interp, ScriptedKeys([]), frames.append)
    dbg.handle(KeyEvent.STEP)
    dbg.handle(KeyEvent.STEP)
    dbg.handle(KeyEvent.CONTINUE)
    while not dbg.terminated:
        dbg.tick()
    assert [(f.pc, f.pointer, f.halted) for f in frames] == [
        (1, 0, False),
        (2, 1, False),
        (3, 1, False),
        (4, 2, False),
        (5, 2, True),
    ]
    assert frames[0].debugger.mode is Mode.PAUSED
    assert frames[2].debugger.mode is Mode.RUNNING
    assert frames[-1].debugger.mode is Mode.PAUSED
    assert dbg.state.mode is Mode.TERMINATED
