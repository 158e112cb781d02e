from unittest import mock

from rhiotree.gnuplot import GnuPlot


def test_generate_plotting_time_mode():
    plot = GnuPlot()
    plot.set_x(1000)
    plot.push("a", 1.5)
    plot.set_x(1500)
    plot.push("a", 2.0)
    assert plot.generate_plotting() == (
        "set term qt noraise noenhanced; plot '-' u 1:2  w l title 'a' ;\n"
        "0 1.5\n0.5 2\ne\n"
    )


def test_generate_plotting_two_signals_joined():
    plot = GnuPlot(1)
    plot.set_x(0)
    plot.push("a", 1)
    plot.push("b", 2)
    output = plot.generate_plotting()
    header, _, data = output.partition(";\n")
    assert header.endswith("title 'a' , '-' u 1:2  w l title 'b' ")
    assert data == "0 1\ne\n0 2\ne\n"


def test_generate_plotting_2d_palette():
    plot = GnuPlot(2)
    plot.set_x(0)
    plot.push("x", 3)
    plot.push("y", 4)
    output = plot.generate_plotting()
    assert "'-' u 1:2:3 palette " in output
    assert "title 'x'" not in output
    assert output.endswith("3 4 0\ne\n")


def test_generate_plotting_3d_without_z_has_no_series():
    plot = GnuPlot(3)
    plot.set_x(0)
    plot.push("x", 1)
    plot.push("y", 2)
    assert plot.generate_plotting() == "set term qt noraise; splot ;\n"


def test_generate_plotting_3d_with_color():
    plot = GnuPlot(3)
    plot.set_x(0)
    plot.push("x", 1)
    plot.push("y", 2)
    plot.push("z", 3)
    output = plot.generate_plotting()
    assert "'-' u 1:2:3:4 palette " in output
    assert output.endswith("1 2 3 0\ne\n")


def test_set_x_is_relative_to_first_point():
    plot = GnuPlot()
    plot.set_x(5000)
    plot.set_x(5250)
    assert list(plot.time_ref) == [0, 250]


def test_render_trims_history_and_writes_plot():
    plot = GnuPlot()
    for t, v in [(0, 1.0), (10000, 2.0), (20000, 3.0)]:
        plot.set_x(t)
        plot.push("a", v)
    with mock.patch("rhiotree.gnuplot.subprocess.Popen") as popen:
        plot.render()
        written = popen.return_value.stdin.write.call_args[0][0]
    assert list(plot.time_ref) == [10000, 20000]
    assert list(plot.signals[0].values) == [2.0, 3.0]
    assert written == plot.generate_plotting().encode()
    assert popen.call_args[0][0] == ["gnuplot", "-"]


def test_render_reuses_process():
    plot = GnuPlot()
    plot.set_x(0)
    plot.push("a", 1)
    with mock.patch("rhiotree.gnuplot.subprocess.Popen") as popen:
        plot.render()
        plot.render()
        writes = [c[0][0] for c in popen.return_value.stdin.write.call_args_list]
    assert popen.call_count == 1
    expected = plot.generate_plotting().encode()
    assert writes == [expected, expected]


def test_close_window_sends_quit_twice():
    plot = GnuPlot()
    plot.set_x(0)
    plot.push("a", 1)
    with mock.patch("rhiotree.gnuplot.subprocess.Popen") as popen:
        plot.render()
        plot.close_window()
        stdin = popen.return_value.stdin
    writes = [c[0][0] for c in stdin.write.call_args_list]
    assert writes == [plot.generate_plotting().encode(), b"quit\n", b"quit\n"]
    assert stdin.close.called