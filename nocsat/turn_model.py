"""Turn models: deadlock-free routing disciplines for mesh NoCs.

A turn is a pair of consecutive links `(link1, link2)` where `link2` leaves
the router `link1` arrives at. Turn models prevent routing deadlock by
forbidding enough turns to break every cycle in the channel dependency graph.
The SAT router only consumes the set of illegal turns produced by
:py:meth:`.TurnModel.illegal_turns`.

Algorithm reference: C. J. Glass and L. M. Ni, The Turn Model for Adaptive
Routing, ISCA (1992).
"""

from nocsat.directions import Direction


class TurnModel(object):
    """Base turn model which only forbids reversals (180-degree turns).

    Subclasses forbid additional turns by overriding
    :py:meth:`.is_turn_legal`.
    """

    name = "none"

    def is_turn_legal(self, in_direction, out_direction):
        """Test whether a packet travelling in `in_direction` may leave a
        router in `out_direction`.

        Neither direction is ever the opposite of the other: reversals are
        rejected before this method is consulted.
        """
        return True

    def illegal_turns(self, topology):
        """Enumerate all illegal turns in a topology.

        Parameters
        ----------
        topology : :py:class:`~nocsat.topology.NocTopology`

        Returns
        -------
        [(link1, link2), ...]
            Pairs of link indices, ordered by `link1` then by the order of
            `link2` in the outgoing links of `link1`'s sink.
        """
        illegal = []
        for link1 in topology.links:
            for link2_index in topology.outgoing_links(link1.sink):
                link2 = topology.links[link2_index]
                if link2.sink == link1.source:
                    # Straight back where we came from
                    illegal.append((link1.index, link2.index))
                elif (link1.direction is not None and
                        link2.direction is not None and
                        link1.direction != link2.direction and
                        not self.is_turn_legal(link1.direction,
                                               link2.direction)):
                    illegal.append((link1.index, link2.index))
        return illegal

    def __repr__(self):
        return "{}()".format(self.__class__.__name__)


class XYRouting(TurnModel):
    """Dimension-ordered routing: travel along x first, then along y.

    Every turn from a vertical into a horizontal direction is forbidden.
    """

    name = "xy"

    def is_turn_legal(self, in_direction, out_direction):
        return in_direction.is_horizontal or not out_direction.is_horizontal


class WestFirstRouting(TurnModel):
    """Any westward travel must happen first: turns into west are forbidden.
    """

    name = "west-first"

    def is_turn_legal(self, in_direction, out_direction):
        return out_direction != Direction.west


class NorthLastRouting(TurnModel):
    """Northward travel must happen last: turns out of north are forbidden.
    """

    name = "north-last"

    def is_turn_legal(self, in_direction, out_direction):
        return in_direction != Direction.north


class NegativeFirstRouting(TurnModel):
    """Travel in the negative directions (west and south) must happen first:
    turns from a positive into a negative direction are forbidden.
    """

    name = "negative-first"

    def is_turn_legal(self, in_direction, out_direction):
        positive = (Direction.east, Direction.north)
        negative = (Direction.west, Direction.south)
        return not (in_direction in positive and out_direction in negative)


"""All available turn models, by name."""
TURN_MODELS = {model.name: model for model in (TurnModel,
                                               XYRouting,
                                               WestFirstRouting,
                                               NorthLastRouting,
                                               NegativeFirstRouting)}
