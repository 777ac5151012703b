from pytest_mock import MockerFixture

from peerless.command.status import StatusCommand
from peerless.domain.torrent import SessionInfo, SessionStats
from peerless.service.torrent import DetailedStatus, DirectoryStatus, StatusService


def _status() -> DetailedStatus:
    return DetailedStatus(
        SessionInfo(download_dir="/downloads", download_dir_free=1024, peer_port=51413),
        SessionStats(downloaded_bytes=2048, uploaded_bytes=512),
        SessionStats(downloaded_bytes=4096, uploaded_bytes=1024),
        total_torrents=4,
        downloading_torrents=1,
        seeding_torrents=1,
        paused_torrents=1,
        completed_torrents=1,
        total_size=3072,
        downloaded_size=2048,
        remaining_size=1024,
        total_download_speed=100,
        total_upload_speed=2048,
        directory_breakdown={
            "/downloads": DirectoryStatus(torrent_count=4, total_size=3072)
        },
    )


def test_status_output(mocker: MockerFixture, capsys):
    service = mocker.Mock(spec=StatusService)
    service.get_detailed_status.return_value = _status()
    command = StatusCommand(service)

    output = command.run()
    output.display()

    result = capsys.readouterr().out
    assert "Torrents: 4 total, 1 downloading, 1 seeding, 1 paused, 1 completed" in result
    assert "Size: 3.00 KB total, 2.00 KB downloaded, 1.00 KB remaining" in result
    assert "Speed: 100 B/s down, 2.00 KB/s up" in result
    assert "Download directory: /downloads" in result
    assert "Free space: 1.00 KB" in result
    assert "Peer port: 51413" in result
    assert "Session: 2.00 KB downloaded, 512 B uploaded" in result
    assert "All time: 4.00 KB downloaded, 1.00 KB uploaded" in result
    assert "Directory" in result
    assert "3.00 KB" in result.splitlines()[-1]


def test_status_output_sanitizes_download_dir(mocker: MockerFixture, capsys):
    service = mocker.Mock(spec=StatusService)
    service.get_detailed_status.return_value = DetailedStatus(
        SessionInfo(download_dir="/down\u202eloads\x1b"), SessionStats(), SessionStats()
    )
    command = StatusCommand(service)

    command.run().display()

    assert "Download directory: /downloads\n" in capsys.readouterr().out
