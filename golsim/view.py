import logging
import signal

import vispy
import vispy.scene
from vispy.scene import visuals
import vispy.app

from .constants import PANEL_WIDTH, PANEL_MARGIN, DRAW_INTERVAL, BACKGROUND_COLOR, TEXT_COLOR

logger = logging.getLogger(__name__)


def animate_game(simulation, config, interval=DRAW_INTERVAL):
    """
    Open the window for a simulation and run it until it is closed.

    Args:
        simulation: A Simulation wrapping the game and an optional recorder
        config: The SimulationConfig the simulation was built from
        interval: Seconds between display ticks

    SPACE pauses, ESC or closing the window ends the run and encodes the
    recording. Ctrl+C aborts the recording instead.
    """
    if interval <= 0:
        raise ValueError("interval must be positive")

    canvas = vispy.scene.SceneCanvas(
        keys='interactive',
        size=(config.width + PANEL_WIDTH, config.height + PANEL_MARGIN),
        title='Game Of Life',
        bgcolor=BACKGROUND_COLOR,
        show=True,
    )

    # Canvas pixels map 1:1 onto the rendered frame
    image = visuals.Image(simulation.frame, interpolation='nearest', parent=canvas.scene)

    text = visuals.Text(simulation.status_text(), pos=(config.width + 10, 20), anchor_x='left',
                        color=TEXT_COLOR, font_size=10, parent=canvas.scene)
    text.order = 1  # Ensure text is drawn on top

    def update(ev):
        decision = simulation.tick()
        if decision.step:
            image.set_data(simulation.frame)
        text.text = simulation.status_text()
        canvas.update()

        if simulation.finished:
            canvas.close()

    def on_key_press(event):
        if event.key == ' ':
            paused = simulation.toggle_pause()
            logger.info("Paused" if paused else "Resumed")

    def on_close(event):
        timer.stop()
        vispy.app.quit()

    def on_interrupt(signum, frame):
        logger.warning("Interrupted, dropping the recording")
        simulation.abort()
        timer.stop()
        vispy.app.quit()

    canvas.events.key_press.connect(on_key_press)
    canvas.events.close.connect(on_close)
    previous_handler = signal.signal(signal.SIGINT, on_interrupt)

    timer = vispy.app.Timer(interval=interval)
    timer.connect(update)
    timer.start()

    try:
        vispy.app.run()
        # Encoding runs with the interrupt handler still installed; a no-op
        # when the recording was aborted
        simulation.finish()
    except KeyboardInterrupt:
        simulation.abort()
        raise
    finally:
        timer.stop()
        signal.signal(signal.SIGINT, previous_handler)
