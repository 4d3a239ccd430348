import numpy as np
import pytest

from particle_fft.domains import DualDomain, SampledDomain
from particle_fft.errors import (
    DimensionMismatchError,
    EmptyCompositeError,
    IncompatibleDomainError,
)
from particle_fft.operators import DiagonalOperator, LazyProduct, LazySum
from particle_fft.particle import momentum, position, transform


@pytest.fixture
def dom():
    return SampledDomain(-5.0, 5.0, 32)


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


def _random_state(rng, n):
    return rng.normal(size=n) + 1j * rng.normal(size=n)


def test_position_on_unit_vectors(dom):
    X = position(dom)
    pts = dom.points
    for i in (0, 7, dom.npoints - 1):
        e = np.zeros(dom.npoints, dtype=complex)
        e[i] = 1.0
        out = X.apply(e)
        assert np.count_nonzero(out) == 1
        assert out[i] == pytest.approx(pts[i])


def test_momentum_values_on_dual(dom):
    dual = DualDomain.from_position(dom)
    P = momentum(dual)
    assert np.allclose(P.values, dual.points)
    assert P.domain_in == dual and P.domain_out == dual


def test_diagonal_apply_does_not_mutate(dom, rng):
    D = DiagonalOperator(dom, np.arange(dom.npoints))
    psi = _random_state(rng, dom.npoints)
    before = psi.copy()
    out = D.apply(psi)
    assert np.array_equal(psi, before)
    assert out is not psi
    assert np.allclose(out, np.arange(dom.npoints) * before)


def test_diagonal_values_are_read_only(dom):
    D = DiagonalOperator(dom, np.ones(dom.npoints))
    with pytest.raises(ValueError):
        D.values[0] = 5.0


def test_diagonal_rejects_wrong_value_shape(dom):
    with pytest.raises(DimensionMismatchError):
        DiagonalOperator(dom, np.ones(dom.npoints + 1))


def test_apply_wrong_length_raises(dom):
    D = DiagonalOperator(dom, np.ones(dom.npoints))
    with pytest.raises(DimensionMismatchError):
        D.apply(np.ones(dom.npoints - 1))
    with pytest.raises(DimensionMismatchError):
        D.apply(np.ones((2, 2, 2)))


def test_lazy_product_scalars_apply_right_to_left(dom):
    A = DiagonalOperator(dom, 2.0 * np.ones(dom.npoints))
    B = DiagonalOperator(dom, 3.0 * np.ones(dom.npoints))
    out = LazyProduct(A, B).apply(np.ones(dom.npoints))
    assert np.allclose(out, 6.0)


def test_lazy_product_order_matters_for_non_commuting(dom, rng):
    dual = DualDomain.from_position(dom)
    Tp = transform(dual, dom)
    Tx = transform(dom, dual)
    X = position(dom)
    P2 = LazyProduct(Tx, DiagonalOperator(dual, dual.points**2), Tp)
    psi = _random_state(rng, dom.npoints)

    xp = LazyProduct(X, P2).apply(psi)
    px = LazyProduct(P2, X).apply(psi)
    assert np.allclose(xp, X.apply(P2.apply(psi)))
    assert np.allclose(px, P2.apply(X.apply(psi)))
    assert not np.allclose(xp, px)


def test_lazy_product_applies_rightmost_transform_first(dom, rng):
    dual = DualDomain.from_position(dom)
    Tp = transform(dual, dom)
    Dp = DiagonalOperator(dual, np.exp(1j * dual.points))
    psi = _random_state(rng, dom.npoints)
    out = LazyProduct(Dp, Tp).apply(psi)
    assert np.allclose(out, Dp.apply(Tp.apply(psi)))
    # Reversed order would feed a momentum-grid operator a position state.
    with pytest.raises(IncompatibleDomainError):
        LazyProduct(Tp, Dp)


def test_lazy_sum_linearity(dom, rng):
    dual = DualDomain.from_position(dom)
    X = position(dom)
    K = LazyProduct(
        transform(dom, dual), DiagonalOperator(dual, dual.points**2), transform(dual, dom)
    )
    psi = _random_state(rng, dom.npoints)
    out = LazySum(X, K).apply(psi)
    assert np.allclose(out, X.apply(psi) + K.apply(psi))


def test_lazy_sum_factors(dom, rng):
    A = DiagonalOperator(dom, np.linspace(0, 1, dom.npoints))
    B = DiagonalOperator(dom, np.ones(dom.npoints))
    psi = _random_state(rng, dom.npoints)
    out = LazySum(A, B, factors=(2.0, -1j)).apply(psi)
    assert np.allclose(out, 2.0 * A.apply(psi) - 1j * B.apply(psi))
    with pytest.raises(ValueError):
        LazySum(A, B, factors=(1.0,))


def test_empty_lazy_sum_raises():
    with pytest.raises(EmptyCompositeError):
        LazySum()


def test_empty_lazy_product_is_identity(rng):
    Id = LazyProduct()
    assert Id.is_identity
    assert Id.domain_in is None and Id.domain_out is None
    for n in (1, 5, 17):
        psi = _random_state(rng, n)
        out = Id.apply(psi)
        assert np.array_equal(out, psi)
        assert out is not psi


def test_lazy_sum_rejects_mixed_domains(dom):
    dual = DualDomain.from_position(dom)
    with pytest.raises(IncompatibleDomainError):
        LazySum(position(dom), momentum(dual))


def test_lazy_sum_identity_needs_matching_in_and_out(dom, rng):
    dual = DualDomain.from_position(dom)
    with pytest.raises(IncompatibleDomainError):
        LazySum(LazyProduct(), transform(dual, dom))
    with pytest.raises(IncompatibleDomainError):
        LazySum(transform(dom, dual), LazyProduct())

    X = position(dom)
    S = LazySum(LazyProduct(), X)
    assert S.domain_in == dom and S.domain_out == dom
    psi = _random_state(rng, dom.npoints)
    assert np.allclose(S.apply(psi), psi + X.apply(psi))


def test_composites_hold_references(dom):
    X = position(dom)
    S = LazySum(X, X)
    P = LazyProduct(X, X)
    assert S.terms[0] is X and S.terms[1] is X
    assert P.terms == (X, X)


def test_operator_sugar(dom, rng):
    A = DiagonalOperator(dom, np.linspace(-1, 1, dom.npoints))
    B = DiagonalOperator(dom, np.linspace(2, 3, dom.npoints))
    psi = _random_state(rng, dom.npoints)
    a, b = A.apply(psi), B.apply(psi)
    assert np.allclose((A + B).apply(psi), a + b)
    assert np.allclose((A - B).apply(psi), a - b)
    assert np.allclose((-A).apply(psi), -a)
    assert np.allclose((2.5 * A).apply(psi), 2.5 * a)
    assert np.allclose((A * 2).apply(psi), 2 * a)
    assert np.allclose((A @ B).apply(psi), A.apply(b))
    assert np.allclose((A * B).apply(psi), A.apply(b))
    assert np.allclose(A(psi), a)


def test_column_stack_matches_individual_applies(dom, rng):
    dual = DualDomain.from_position(dom)
    H = LazySum(
        LazyProduct(
            transform(dom, dual),
            DiagonalOperator(dual, dual.points**2 / 2),
            transform(dual, dom),
        ),
        position(dom),
    )
    a = _random_state(rng, dom.npoints)
    b = _random_state(rng, dom.npoints)
    out = H.apply(np.column_stack([a, b]))
    assert out.shape == (dom.npoints, 2)
    assert np.allclose(out[:, 0], H.apply(a))
    assert np.allclose(out[:, 1], H.apply(b))


def test_dense_matches_apply(dom, rng):
    A = DiagonalOperator(dom, np.linspace(-1, 1, dom.npoints))
    P = LazyProduct(A, A, factor=0.5)
    M = P.dense()
    psi = _random_state(rng, dom.npoints)
    assert M.shape == (dom.npoints, dom.npoints)
    assert np.allclose(M @ psi, P.apply(psi))
    assert np.allclose(A.dense(), np.diag(A.values))
    with pytest.raises(DimensionMismatchError):
        LazyProduct().dense()


def test_adjoint_of_composites(dom, rng):
    dual = DualDomain.from_position(dom)
    D = DiagonalOperator(dom, np.exp(1j * dom.points))
    Dp = DiagonalOperator(dual, 1j * dual.points)
    Tp = transform(dual, dom)
    Tx = transform(dom, dual)
    op = LazyProduct(Tx, Dp, Tp, D, factor=2j)
    adj = op.adjoint()
    assert isinstance(adj, LazyProduct)
    assert adj.factor == -2j

    phi = _random_state(rng, dom.npoints)
    psi = _random_state(rng, dom.npoints)
    # Same-domain operator: weighted and plain adjoints coincide.
    assert np.isclose(np.vdot(op.apply(psi), phi), np.vdot(psi, adj.apply(phi)))

    S = LazySum(D, op, factors=(1j, 1.0))
    S_adj = S.adjoint()
    assert S_adj.factors == (-1j, 1.0)
    assert np.isclose(np.vdot(S.apply(psi), phi), np.vdot(psi, S_adj.apply(phi)))
