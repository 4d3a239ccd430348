import numpy as np
import pytest

from particle_fft.domains import DualDomain, SampledDomain
from particle_fft.errors import DimensionMismatchError, InvalidDomainError
from particle_fft.operators import DiagonalOperator, LazyProduct, LazySum, TransformOperator
from particle_fft.particle import (
    hamiltonian,
    kinetic_operator,
    momentum,
    position,
    potential_operator,
)
from particle_fft.potentials import harmonic_potential


@pytest.fixture
def dom():
    return SampledDomain(-10.0, 10.0, 128)


def test_hamiltonian_structure(dom):
    H = hamiltonian(dom, harmonic_potential)
    assert isinstance(H, LazySum)
    kinetic, V = H.terms
    assert isinstance(kinetic, LazyProduct)
    Tx, K, Tp = kinetic.terms
    assert isinstance(Tx, TransformOperator) and not Tx.is_forward
    assert isinstance(Tp, TransformOperator) and Tp.is_forward
    assert isinstance(K, DiagonalOperator) and isinstance(K.domain, DualDomain)
    assert isinstance(V, DiagonalOperator) and V.domain == dom
    assert H.domain_in == dom and H.domain_out == dom


def test_harmonic_oscillator_spectrum(dom):
    H = hamiltonian(dom, lambda x: 0.5 * x**2)
    Hd = H.dense()
    assert np.allclose(Hd, Hd.conj().T)
    evals = np.linalg.eigvalsh(Hd)
    assert np.allclose(evals[:4], [0.5, 1.5, 2.5, 3.5], atol=1e-6)


def test_mass_and_hbar_scale_spectrum(dom):
    # omega = sqrt(k/m); E_n = hbar * omega * (n + 1/2)
    mass, hbar, k = 2.0, 0.5, 8.0
    H = hamiltonian(dom, lambda x: 0.5 * k * x**2, mass=mass, hbar=hbar)
    evals = np.linalg.eigvalsh(H.dense())
    omega = np.sqrt(k / mass)
    assert np.allclose(evals[:3], hbar * omega * (np.arange(3) + 0.5), atol=1e-6)


def test_kinetic_operator_on_plane_wave(dom):
    dual = DualDomain.from_position(dom)
    T = kinetic_operator(dom, mass=1.5, dual=dual)
    p0 = dual.points[70]
    psi = np.exp(1j * p0 * dom.points)
    assert np.allclose(T.apply(psi), p0**2 / 3.0 * psi)


def test_hamiltonian_is_self_adjoint(dom):
    rng = np.random.default_rng(0)
    H = hamiltonian(dom, harmonic_potential)
    psi = rng.normal(size=dom.npoints) + 1j * rng.normal(size=dom.npoints)
    assert np.allclose(H.adjoint().apply(psi), H.apply(psi))


def test_potential_operator_inputs(dom):
    from_callable = potential_operator(dom, np.cos)
    from_array = potential_operator(dom, np.cos(dom.points))
    from_scalar = potential_operator(dom, 2.0)
    assert np.allclose(from_callable.values, from_array.values)
    assert np.allclose(from_scalar.values, 2.0)
    with pytest.raises(DimensionMismatchError):
        potential_operator(dom, np.ones(3))


def test_constructors_check_domain_kind(dom):
    dual = DualDomain.from_position(dom)
    with pytest.raises(InvalidDomainError):
        momentum(dom)
    with pytest.raises(InvalidDomainError):
        position(dual)
    with pytest.raises(InvalidDomainError):
        hamiltonian(dual, 0.0)
    with pytest.raises(ValueError):
        kinetic_operator(dom, mass=0.0)
    with pytest.raises(ValueError):
        kinetic_operator(dom, hbar=0.0)
    with pytest.raises(ValueError):
        hamiltonian(dom, 0.0, hbar=-1.0)
