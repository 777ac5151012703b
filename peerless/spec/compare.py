""" Compare the entries of a directory with torrent locations by exact absolute path.

Usage:
    peerless compare <dir>

Arguments:
    <dir>   Directory whose entries are compared with the torrents in Transmission.
"""
